"""Testes da aritmética de intervalos."""

from __future__ import annotations

from datetime import datetime, time

import pytest

from scheduling.services.intervals import (
    Interval,
    add_minutes,
    at_time,
    day_bounds,
    fits_within,
    format_end_time,
    overlaps,
    parse_time_of_day,
    subtract,
    subtract_all,
)
from tests.fakes.scheduling_fakes import MONDAY, at
from utils.errors import InvalidTimeError


class TestOverlaps:
    """Testes de sobreposição semiaberta."""

    def test_partial_overlap(self) -> None:
        """Intervalos cruzados se sobrepõem."""
        assert overlaps(Interval(at(10), at(11)), Interval(at(10, 30), at(11, 30)))

    def test_touching_endpoints_do_not_overlap(self) -> None:
        """Fim de um igual ao início do outro não conflita."""
        assert not overlaps(Interval(at(10), at(10, 30)), Interval(at(10, 30), at(11)))
        assert not overlaps(Interval(at(10, 30), at(11)), Interval(at(10), at(10, 30)))

    def test_containment_overlaps(self) -> None:
        """Intervalo contido se sobrepõe ao externo."""
        assert overlaps(Interval(at(9), at(12)), Interval(at(10), at(10, 15)))

    def test_contains_requires_full_fit(self) -> None:
        """contains exige o candidato inteiro."""
        block = Interval(at(9), at(12))
        assert block.contains(Interval(at(9), at(12)))
        assert not block.contains(Interval(at(11, 30), at(12, 30)))


class TestAddMinutes:
    """Testes de add_minutes."""

    def test_adds_minutes(self) -> None:
        """Soma a duração ao horário."""
        assert add_minutes(at(10), 45) == at(10, 45)

    @pytest.mark.parametrize("minutes", [float("nan"), float("inf"), "30", None, True])
    def test_rejects_invalid_duration(self, minutes: object) -> None:
        """Duração não numérica ou não finita levanta InvalidTimeError."""
        with pytest.raises(InvalidTimeError):
            add_minutes(at(10), minutes)  # type: ignore[arg-type]

    def test_rejects_non_datetime(self) -> None:
        """Horário que não é datetime levanta InvalidTimeError."""
        with pytest.raises(InvalidTimeError):
            add_minutes("2026-03-02 10:00", 30)  # type: ignore[arg-type]


class TestDayBounds:
    """Testes de day_bounds."""

    def test_returns_midnight_and_next_midnight(self) -> None:
        """Limite final é exclusivo (meia-noite seguinte)."""
        start, end = day_bounds(at(15, 20))
        assert start == datetime(2026, 3, 2)
        assert end == datetime(2026, 3, 3)


class TestParseTimeOfDay:
    """Testes de parse de "HH:MM"."""

    def test_single_digit_hour(self) -> None:
        """Aceita hora com um dígito."""
        assert parse_time_of_day("9:05") == time(9, 5)

    def test_end_of_day_marker(self) -> None:
        """24:00 representa o fim do dia."""
        assert parse_time_of_day("24:00") == time.max

    @pytest.mark.parametrize("value", ["25:00", "10:75", "ab:cd", "", "10h30"])
    def test_invalid_values(self, value: str) -> None:
        """Formatos ilegíveis levantam InvalidTimeError."""
        with pytest.raises(InvalidTimeError):
            parse_time_of_day(value)

    def test_at_time_combines_with_day(self) -> None:
        """at_time combina data e horário."""
        assert at_time(at(15), "08:30") == at(8, 30)

    def test_at_time_end_of_day_is_next_midnight(self) -> None:
        """24:00 vira a meia-noite seguinte, limite exclusivo."""
        assert at_time(at(15), "24:00") == datetime(2026, 3, 3)
        assert Interval(at(23, 30), at_time(MONDAY, "24:00")).minutes == 30

    def test_format_end_time_keeps_end_of_day(self) -> None:
        """Fim na meia-noite seguinte sai como 24:00."""
        assert format_end_time(at(23, 30), datetime(2026, 3, 3)) == "24:00"
        assert format_end_time(at(10), at(10, 30)) == "10:30"


class TestSubtract:
    """Testes de subtração de bloqueios."""

    def test_block_outside_keeps_interval(self) -> None:
        """Bloqueio sem sobreposição mantém o intervalo."""
        interval = Interval(at(9), at(12))
        assert subtract(interval, Interval(at(13), at(14))) == [interval]

    def test_block_covering_everything(self) -> None:
        """Bloqueio que cobre tudo elimina o intervalo."""
        assert subtract(Interval(at(9), at(12)), Interval(at(8), at(13))) == []

    def test_block_in_the_middle_splits(self) -> None:
        """Bloqueio no meio divide em dois."""
        result = subtract(Interval(at(9), at(18)), Interval(at(13), at(14)))
        assert result == [Interval(at(9), at(13)), Interval(at(14), at(18))]

    def test_block_at_start_and_end(self) -> None:
        """Bloqueio nas bordas corta só a parte atingida."""
        assert subtract(Interval(at(9), at(12)), Interval(at(8), at(10))) == [
            Interval(at(10), at(12))
        ]
        assert subtract(Interval(at(9), at(12)), Interval(at(11), at(13))) == [
            Interval(at(9), at(11))
        ]

    def test_subtract_all_orders_blocks(self) -> None:
        """Bloqueios fora de ordem geram sub-intervalos ordenados."""
        result = subtract_all(
            [Interval(at(9), at(18))],
            [Interval(at(15), at(15, 30)), Interval(at(12), at(13))],
        )
        assert result == [
            Interval(at(9), at(12)),
            Interval(at(13), at(15)),
            Interval(at(15, 30), at(18)),
        ]

    def test_fits_within(self) -> None:
        """Candidato deve caber inteiro em um dos intervalos."""
        blocks = [Interval(at(9), at(13)), Interval(at(14), at(18))]
        assert fits_within(Interval(at(14), at(15)), blocks)
        assert not fits_within(Interval(at(12, 30), at(13, 30)), blocks)
        assert not fits_within(Interval(MONDAY, at(1)), [])
