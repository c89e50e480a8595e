"""
Enrichment gateway for the 5e SRD API (https://www.dnd5eapi.co/ or a local
mirror such as http://localhost:3000/api/2014).

Every lookup is best-effort. Transport failures, non-200 responses,
undecodable bodies and bodies of the wrong shape are logged and raised as
EnrichmentUnavailableError; callers are expected to fall back to the local tables.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar

import httpx

from .abilities import normalize_race
from .config import DEFAULT_API_BASE
from .exceptions import EnrichmentUnavailableError
from .logutils import logger
from .models import ArmorInfo, SpellInfo, TraitInfo, WeaponInfo
from .reference_data import to_index


T = TypeVar("T")

DEFAULT_TIMEOUT = 5.0
DEFAULT_MAX_PER_SECOND = 5

# SRD trait -> skill proficiency it stands in for
SKILL_TRAITS = (
    ("stonecunning", "history"),
    ("keen-senses", "perception"),
    ("menacing", "intimidation"),
)

# SRD traits checked when listing a race's traits
RACIAL_TRAITS = (
    "stonecunning",
    "darkvision",
    "dwarven-resilience",
    "dwarven-combat-training",
    "keen-senses",
    "fey-ancestry",
    "trance",
    "menacing",
    "relentless-endurance",
    "savage-attacks",
    "brave",
    "halfling-nimbleness",
    "lucky",
)


def _parse_weapon(data: dict[str, Any], name: str) -> WeaponInfo:
    weapon_range = data.get("range") or {}
    return WeaponInfo(
        name=data.get("name") or name,
        category=data.get("weapon_category") or "",
        range=weapon_range.get("normal") or 0,
        two_handed=bool(data.get("two_handed", False)),
    )


def _parse_armor(data: dict[str, Any], name: str) -> ArmorInfo:
    armor_class = data.get("armor_class") or {}
    if not armor_class.get("base"):
        raise EnrichmentUnavailableError(f"'{name}' has no armor class in the API")
    return ArmorInfo(
        name=data.get("name") or name,
        base_ac=armor_class["base"],
        dex_bonus=bool(armor_class.get("dex_bonus", False)),
    )


def _parse_spell(data: dict[str, Any], name: str) -> SpellInfo:
    school = data.get("school") or {}
    return SpellInfo(
        name=data.get("name") or name,
        range=data.get("range") or "",
        school=school.get("name") or "",
    )


def _trait_belongs_to(data: dict[str, Any], race: str) -> bool:
    races = data.get("races") or []
    if not isinstance(races, list):
        return False
    for entry in races:
        if not isinstance(entry, dict):
            continue
        if normalize_race(str(entry.get("index", ""))) == race or normalize_race(str(entry.get("name", ""))) == race:
            return True
    return False


class EnrichmentGateway:
    """
    Async client for weapon, armor, spell and racial-trait lookups.

    The gateway can be used as an async context manager to share one
    connection pool across calls; otherwise each call opens a short-lived
    httpx.AsyncClient. An injected ``client`` is used as-is and never closed
    by the gateway.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = False

    async def __aenter__(self) -> EnrichmentGateway:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if the gateway opened it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    # =========================================================================
    # HTTP Helpers
    # =========================================================================

    async def _fetch_json(self, client: httpx.AsyncClient, path: str) -> dict[str, Any]:
        """
        GET ``{base_url}/{path}`` and decode the JSON body.

        Raises:
            EnrichmentUnavailableError: On any transport, status or decode failure.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await client.get(url, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.warning(f"⚠️ Timeout fetching {url}")
            raise EnrichmentUnavailableError(f"Timeout fetching {url}", url=url) from e
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Could not reach {url}: {e}")
            raise EnrichmentUnavailableError(f"Could not reach {url}: {e}", url=url) from e

        if response.status_code != 200:
            logger.warning(f"⚠️ {url} returned status {response.status_code}")
            raise EnrichmentUnavailableError(
                f"API returned status {response.status_code} for {url}",
                url=url,
                details={"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"⚠️ Undecodable response from {url}")
            raise EnrichmentUnavailableError(f"Invalid JSON from {url}", url=url) from e

        if not isinstance(data, dict):
            raise EnrichmentUnavailableError(f"Unexpected response shape from {url}", url=url)
        return data

    # =========================================================================
    # Single lookups
    # =========================================================================

    async def _lookup(
        self,
        client: httpx.AsyncClient,
        path: str,
        name: str,
        parse: Callable[[dict[str, Any], str], T],
    ) -> T:
        """
        Fetch ``path`` and turn the body into a model with ``parse``.

        Raises:
            EnrichmentUnavailableError: If the fetch fails or the body does
                not have the expected shape.
        """
        data = await self._fetch_json(client, path)
        try:
            return parse(data, name)
        except (AttributeError, TypeError, KeyError, ValueError) as e:
            # pydantic.ValidationError is a ValueError
            logger.warning(f"⚠️ Unexpected response shape for '{name}' from {path}: {e}")
            raise EnrichmentUnavailableError(
                f"Unexpected response shape for '{name}'",
                url=f"{self.base_url}/{path}",
            ) from e

    async def _weapon(self, client: httpx.AsyncClient, name: str) -> WeaponInfo:
        return await self._lookup(client, f"equipment/{to_index(name)}", name, _parse_weapon)

    async def _armor(self, client: httpx.AsyncClient, name: str) -> ArmorInfo:
        return await self._lookup(client, f"equipment/{to_index(name)}", name, _parse_armor)

    async def _spell(self, client: httpx.AsyncClient, name: str) -> SpellInfo:
        return await self._lookup(client, f"spells/{to_index(name)}", name, _parse_spell)

    async def get_weapon(self, name: str) -> WeaponInfo:
        async with self._session() as client:
            return await self._weapon(client, name)

    async def get_armor(self, name: str) -> ArmorInfo:
        async with self._session() as client:
            return await self._armor(client, name)

    async def get_spell(self, name: str) -> SpellInfo:
        async with self._session() as client:
            return await self._spell(client, name)

    # =========================================================================
    # Racial traits
    # =========================================================================

    async def get_racial_skill_proficiencies(self, race: str) -> list[str]:
        """
        Skills a race gets from its SRD traits.

        The three skill-granting traits are fetched concurrently; a trait
        that cannot be fetched simply contributes nothing.
        """
        race_key = normalize_race(race)
        async with self._session() as client:
            results = await asyncio.gather(
                *(self._fetch_json(client, f"traits/{trait}") for trait, _ in SKILL_TRAITS),
                return_exceptions=True,
            )

        skills: list[str] = []
        for (trait, skill), result in zip(SKILL_TRAITS, results):
            if isinstance(result, BaseException):
                logger.debug(f"Trait '{trait}' unavailable: {result}")
                continue
            if _trait_belongs_to(result, race_key):
                skills.append(skill)
        return skills

    async def get_racial_traits(self, race: str) -> list[TraitInfo]:
        """All known SRD traits whose race list includes ``race``."""
        race_key = normalize_race(race)
        async with self._session() as client:
            results = await asyncio.gather(
                *(self._fetch_json(client, f"traits/{trait}") for trait in RACIAL_TRAITS),
                return_exceptions=True,
            )

        traits: list[TraitInfo] = []
        for trait, result in zip(RACIAL_TRAITS, results):
            if isinstance(result, BaseException):
                logger.debug(f"Trait '{trait}' unavailable: {result}")
                continue
            if not _trait_belongs_to(result, race_key):
                continue
            try:
                traits.append(TraitInfo(
                    index=result.get("index") or trait,
                    name=result.get("name") or trait,
                    desc=list(result.get("desc") or []),
                ))
            except (TypeError, ValueError) as e:
                logger.debug(f"Trait '{trait}' has an unexpected shape: {e}")
        return traits

    # =========================================================================
    # Batch lookups
    # =========================================================================

    async def _batch(
        self,
        names: list[str],
        max_per_second: int,
        fetch: Callable[[httpx.AsyncClient, str], Awaitable[T]],
    ) -> dict[str, T]:
        """
        Run ``fetch`` for every name, starting at most ``max_per_second``
        requests per second and keeping at most that many in flight.

        Names whose lookup fails are left out of the result.
        """
        if max_per_second <= 0:
            max_per_second = DEFAULT_MAX_PER_SECOND
        interval = 1.0 / max_per_second
        semaphore = asyncio.Semaphore(max_per_second)
        results: dict[str, T] = {}

        async def run_one(client: httpx.AsyncClient, name: str) -> None:
            async with semaphore:
                try:
                    results[name] = await fetch(client, name)
                except EnrichmentUnavailableError as e:
                    logger.warning(f"⚠️ Failed to fetch '{name}': {e}")

        async with self._session() as client:
            tasks = []
            for i, name in enumerate(names):
                if i:
                    await asyncio.sleep(interval)
                tasks.append(asyncio.create_task(run_one(client, name)))
            await asyncio.gather(*tasks)
        return results

    async def get_weapons_batch(self, names: list[str], max_per_second: int = DEFAULT_MAX_PER_SECOND) -> dict[str, WeaponInfo]:
        return await self._batch(names, max_per_second, self._weapon)

    async def get_armors_batch(self, names: list[str], max_per_second: int = DEFAULT_MAX_PER_SECOND) -> dict[str, ArmorInfo]:
        return await self._batch(names, max_per_second, self._armor)

    async def get_spells_batch(self, names: list[str], max_per_second: int = DEFAULT_MAX_PER_SECOND) -> dict[str, SpellInfo]:
        return await self._batch(names, max_per_second, self._spell)
