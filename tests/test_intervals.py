from salon_booking.services.availability.intervals import Interval, contains, overlaps, subtract

from tests.conftest import at


class TestOverlaps:
    def test_partial_overlap(self):
        assert overlaps(at(10), at(11), at(10, 30), at(11, 30))

    def test_symmetric(self):
        pairs = [
            (at(10), at(11), at(10, 30), at(11, 30)),
            (at(10), at(11), at(11), at(12)),
            (at(9), at(18), at(12), at(13)),
            (at(9), at(10), at(14), at(15)),
        ]
        for a_start, a_end, b_start, b_end in pairs:
            assert overlaps(a_start, a_end, b_start, b_end) == overlaps(b_start, b_end, a_start, a_end)

    def test_adjacent_intervals_do_not_overlap(self):
        assert not overlaps(at(10), at(11), at(11), at(12))
        assert not overlaps(at(11), at(12), at(10), at(11))

    def test_containment_overlaps(self):
        assert overlaps(at(9), at(18), at(12), at(13))
        assert overlaps(at(12), at(13), at(9), at(18))

    def test_identical_intervals_overlap(self):
        assert overlaps(at(10), at(11), at(10), at(11))

    def test_works_on_plain_numbers(self):
        assert overlaps(0, 10, 5, 15)
        assert not overlaps(0, 10, 10, 20)


def test_contains():
    day = Interval(at(9), at(12))
    assert contains(day, Interval(at(9), at(9, 30)))
    assert contains(day, Interval(at(11, 30), at(12)))
    assert not contains(day, Interval(at(11, 30), at(12, 30)))
    assert not contains(day, Interval(at(8, 30), at(9, 30)))


class TestSubtract:
    def test_break_splits_day(self):
        free = subtract(Interval(at(9), at(18)), [Interval(at(12), at(13))])
        assert free == [Interval(at(9), at(12)), Interval(at(13), at(18))]

    def test_nothing_busy(self):
        assert subtract(Interval(0, 10), []) == [Interval(0, 10)]

    def test_unsorted_and_overlapping_busy(self):
        free = subtract(Interval(0, 100), [Interval(50, 60), Interval(10, 20), Interval(15, 30)])
        assert free == [Interval(0, 10), Interval(30, 50), Interval(60, 100)]

    def test_busy_outside_is_ignored(self):
        free = subtract(Interval(10, 20), [Interval(0, 5), Interval(20, 30)])
        assert free == [Interval(10, 20)]

    def test_busy_covering_everything(self):
        assert subtract(Interval(10, 20), [Interval(0, 30)]) == []

    def test_busy_at_edges(self):
        free = subtract(Interval(0, 10), [Interval(0, 2), Interval(8, 10)])
        assert free == [Interval(2, 8)]
