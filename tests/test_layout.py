"""Bit layout tests.

The layout trades node count and per-millisecond capacity against how long
after the epoch IDs can be issued. These tests pin down that trade-off.
"""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from snowflake_worker.constants.layout import DEFAULT_EPOCH_MS
from snowflake_worker.exceptions import InvalidLayoutError
from snowflake_worker.models.domain.snowflake import BitLayout


class TestDefaultLayout:
    """Test the standard 41/10/12 partition."""

    def test_capacities(self) -> None:
        layout = BitLayout()

        assert (layout.timestamp_bits, layout.node_bits, layout.sequence_bits) == (41, 10, 12)
        assert layout.max_node_id == 1023
        assert layout.max_sequence == 4095
        assert layout.ids_per_millisecond == 4096
        assert layout.max_elapsed_ms == 2**41 - 1
        assert layout.node_shift == 12
        assert layout.timestamp_shift == 22

    def test_lifetime_is_about_69_years(self) -> None:
        assert 69 < BitLayout().lifetime_years < 70

    def test_default_epoch_is_2020(self) -> None:
        assert datetime.fromtimestamp(DEFAULT_EPOCH_MS / 1000, tz=UTC) == datetime(2020, 1, 1, tzinfo=UTC)

    def test_layout_is_immutable(self) -> None:
        layout = BitLayout()

        with pytest.raises(ValidationError):
            layout.node_bits = 11  # type: ignore[misc]


class TestCustomLayouts:
    """Test non-default widths and their trade-offs."""

    def test_more_nodes_shortens_lifetime(self) -> None:
        layout = BitLayout.from_widths(node_bits=12, sequence_bits=12)

        assert layout.timestamp_bits == 39
        assert layout.max_node_id == 4095
        assert 17 < layout.lifetime_years < 18

    def test_fewer_sequence_bits_lowers_throughput(self) -> None:
        layout = BitLayout.from_widths(node_bits=10, sequence_bits=8)

        assert layout.timestamp_bits == 45
        assert layout.ids_per_millisecond == 256
        assert layout.lifetime_years > 1000

    @pytest.mark.parametrize(
        "widths",
        [
            (41, 10, 11),
            (42, 10, 12),
            (0, 51, 12),
            (41, -1, 23),
            (41, 10, 12.0),
            (41, True, 21),
        ],
    )
    def test_rejects_invalid_widths(self, widths: tuple) -> None:
        timestamp_bits, node_bits, sequence_bits = widths

        with pytest.raises(InvalidLayoutError) as exc_info:
            BitLayout(timestamp_bits=timestamp_bits, node_bits=node_bits, sequence_bits=sequence_bits)
        assert exc_info.value.code == "INVALID_LAYOUT"

    def test_from_widths_rejects_no_room_for_timestamp(self) -> None:
        with pytest.raises(InvalidLayoutError):
            BitLayout.from_widths(node_bits=40, sequence_bits=23)

    def test_model_validate_checks_widths(self) -> None:
        assert BitLayout.model_validate({"timestamp_bits": 39, "node_bits": 12, "sequence_bits": 12}).max_node_id == 4095

        with pytest.raises(ValidationError):
            BitLayout.model_validate({"timestamp_bits": 41, "node_bits": 11, "sequence_bits": 12})

    def test_model_copy_checks_widths(self) -> None:
        layout = BitLayout()

        wider = layout.model_copy(update={"node_bits": 11, "sequence_bits": 11})
        assert wider.max_node_id == 2047
        with pytest.raises(InvalidLayoutError):
            layout.model_copy(update={"node_bits": 11})


class TestComposeDecode:
    """Test packing and unpacking of segments."""

    def test_decode_recovers_segments(self) -> None:
        layout = BitLayout()
        snowflake_id = layout.compose(elapsed_ms=123456789, node_id=1023, sequence=4095)

        parts = layout.decode(snowflake_id, DEFAULT_EPOCH_MS)

        assert parts.id == snowflake_id
        assert parts.elapsed_ms == 123456789
        assert parts.node_id == 1023
        assert parts.sequence == 4095
        assert parts.unix_ms == DEFAULT_EPOCH_MS + 123456789
        assert parts.issued_at == datetime.fromtimestamp(parts.unix_ms / 1000, tz=UTC)

    def test_largest_id_uses_63_bits(self) -> None:
        layout = BitLayout()
        snowflake_id = layout.compose(layout.max_elapsed_ms, layout.max_node_id, layout.max_sequence)

        assert snowflake_id == 2**63 - 1

    @pytest.mark.parametrize("snowflake_id", [-1, 2**63, 2**64])
    def test_decode_rejects_out_of_range(self, snowflake_id: int) -> None:
        with pytest.raises(ValueError):
            BitLayout().decode(snowflake_id, DEFAULT_EPOCH_MS)

    @pytest.mark.parametrize("snowflake_id", [1.5, "123", None, True])
    def test_decode_rejects_non_integers(self, snowflake_id: object) -> None:
        with pytest.raises(ValueError):
            BitLayout().decode(snowflake_id, DEFAULT_EPOCH_MS)  # type: ignore[arg-type]
