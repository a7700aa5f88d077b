"""
Tests unitarios para la paginación de la fuente y el índice de identidad.
"""
import pytest

from zoho_sync.application.reconciliation.identity import IdentityIndex, canonical_key
from zoho_sync.application.reconciliation.pager import SourcePager, fetch_all
from zoho_sync.shared.exceptions.sync import SourceTransportError


QUERY = "SELECT id, Name FROM Mega_Proyectos"


def _records(count: int) -> list:
    return [{"id": str(i), "Name": f"MP {i}"} for i in range(count)]


# =============================================================================
# SourcePager
# =============================================================================

class TestSourcePager:
    @pytest.mark.asyncio
    async def test_pages_until_more_records_is_false(self, fake_source) -> None:
        fake_source.modules["Mega_Proyectos"] = _records(5)
        pager = SourcePager(fake_source, QUERY, page_size=2)

        batches = [batch async for batch in pager]

        assert [len(b) for b in batches] == [2, 2, 1]
        assert pager.pages_fetched == 3
        assert [offset for _, offset, _ in fake_source.calls["query"]] == [0, 2, 4]

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self, fake_source) -> None:
        batches = [batch async for batch in fetch_all(fake_source, QUERY, 200)]

        assert batches == []
        assert len(fake_source.calls["query"]) == 1

    @pytest.mark.asyncio
    async def test_exact_multiple_ends_with_empty_page(self, fake_source) -> None:
        fake_source.modules["Mega_Proyectos"] = _records(4)

        batches = [batch async for batch in fetch_all(fake_source, QUERY, 2)]

        assert sum(len(b) for b in batches) == 4

    @pytest.mark.asyncio
    async def test_page_error_propagates(self, fake_source) -> None:
        fake_source.modules["Mega_Proyectos"] = _records(5)
        fake_source.errors[("query", "Mega_Proyectos", 2)] = SourceTransportError("boom", status_code=500)

        with pytest.raises(SourceTransportError):
            [batch async for batch in fetch_all(fake_source, QUERY, 2)]

    def test_rejects_invalid_page_size(self, fake_source) -> None:
        with pytest.raises(ValueError):
            SourcePager(fake_source, QUERY, page_size=0)

    @pytest.mark.asyncio
    async def test_single_use(self, fake_source) -> None:
        pager = fetch_all(fake_source, QUERY, 10)
        [batch async for batch in pager]

        with pytest.raises(RuntimeError):
            pager.__aiter__()


# =============================================================================
# IdentityIndex
# =============================================================================

class TestCanonicalKey:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (" 123 ", "123"),
            (123, "123"),
            (123.0, "123"),
            ("Sobre planos", "Sobre planos"),
            ("", None),
            ("   ", None),
            (None, None),
        ],
    )
    def test_forms(self, value, expected) -> None:
        assert canonical_key(value) == expected


class TestIdentityIndex:
    def test_last_occurrence_wins_first_position_kept(self) -> None:
        index = IdentityIndex(lambda r: r.get("id"))
        index.extend([
            {"id": "A", "v": 1},
            {"id": "B", "v": 1},
            {"id": " A", "v": 2},
        ])

        assert index.seen == 3
        assert len(index) == 2
        assert [key for key, _ in index.items()] == ["A", "B"]
        assert dict(index.items())["A"]["v"] == 2
        assert index.active_keys() == frozenset({"A", "B"})

    def test_keyless_records_are_tracked(self) -> None:
        index = IdentityIndex(lambda r: r.get("id"))

        assert index.add({"id": None}) is None
        assert index.add({"id": "X"}) == "X"

        assert len(index.keyless) == 1
        assert index.active_keys() == frozenset({"X"})
