import unittest

from loguru import logger

from seatplan.config import SeatPlanSettings
from seatplan.model import GridBlock, RowGroup, Seat, SeatStatus, VenueModel, element_to_dict
from seatplan.numbering import NumberingPolicy, SeatSlot, assign_numbers, clear_numbers, plan_numbers

SETTINGS = SeatPlanSettings(default_price=100)


def make_row(model, counts, xs=None, row_name="1排"):
    blocks = []
    for i, count in enumerate(counts):
        x = xs[i] if xs else i * 200.0
        blocks.append(model.add(GridBlock(center_x=x, center_y=0.0, column_count=count)))
    row = model.add(RowGroup(row_name=row_name, row_number=1, block_ids=[b.id for b in blocks]))
    for b in blocks:
        b.parent = row.id
    return row, blocks


def labels(model, block):
    """column_index -> column_number for the seats hosted by a block."""
    return {s.column_index: s.column_number for s in model.hosted_by(block.id) if isinstance(s, Seat)}


def seat_numbers(model):
    return sorted(s.column_number for s in model.elements() if isinstance(s, Seat))


def number(counts, policy, xs=None):
    m = VenueModel()
    row, blocks = make_row(m, counts, xs)
    assign_numbers(m, row, policy, settings=SETTINGS)
    return m, row, blocks


class TestAscending(unittest.TestCase):
    def test_single_block_of_six(self):
        m, _, (block,) = number([6], NumberingPolicy.ascending)
        self.assertEqual(labels(m, block), {0: 1, 1: 2, 2: 3, 3: 4, 4: 5, 5: 6})

    def test_blocks_numbered_left_to_right_by_center(self):
        m = VenueModel()
        # stored right block first; numbering follows center_x, storage does not change
        row, (right, left) = make_row(m, [3, 2], xs=[200.0, 0.0])
        assign_numbers(m, row, "ascending", settings=SETTINGS)
        self.assertEqual(labels(m, left), {0: 1, 1: 2})
        self.assertEqual(labels(m, right), {0: 3, 1: 4, 2: 5})
        self.assertEqual(row.block_ids, [right.id, left.id])

    def test_labels_cover_total_without_gaps(self):
        for counts in ([1], [3, 4], [5, 1, 7], [2, 2, 2, 2]):
            m, _, blocks = number(counts, NumberingPolicy.ascending)
            seen = []
            for b in blocks:
                seen.extend(labels(m, b)[i] for i in range(b.column_count))
            self.assertEqual(seen, list(range(1, sum(counts) + 1)), counts)


class TestDescending(unittest.TestCase):
    def test_blocks_right_to_left_with_mirrored_index(self):
        m, _, (left, right) = number([2, 3], NumberingPolicy.descending)
        self.assertEqual(labels(m, right), {2: 1, 1: 2, 0: 3})
        self.assertEqual(labels(m, left), {1: 4, 0: 5})

    def test_same_label_set_as_ascending(self):
        counts = [4, 1, 3]
        asc, _, _ = number(counts, NumberingPolicy.ascending)
        desc, _, _ = number(counts, NumberingPolicy.descending)
        self.assertEqual(seat_numbers(asc), seat_numbers(desc))

    def test_index_order_reversed_within_block(self):
        slots = plan_numbers([GridBlock(id=1, center_x=0, center_y=0, column_count=4)], "descending")
        self.assertEqual([s.column_index for s in slots], [3, 2, 1, 0])
        self.assertEqual([s.column_number for s in slots], [1, 2, 3, 4])


class TestCenterSplit(unittest.TestCase):
    def test_two_blocks_four_and_five(self):
        m, _, (first, second) = number([4, 5], NumberingPolicy.center_split)
        self.assertEqual(labels(m, second), {0: 1, 1: 3, 2: 5, 3: 7, 4: 9})
        self.assertEqual(labels(m, first), {3: 2, 2: 4, 1: 6, 0: 8})

    def test_odd_totals_partition_labels(self):
        for counts in ([1], [3], [2, 3], [4, 5], [1, 1, 1], [7, 2, 4], [5, 0, 4]):
            m, _, blocks = number(counts, NumberingPolicy.center_split)
            total = sum(counts)
            nums = sorted(s.column_number for s in m.elements() if isinstance(s, Seat))
            self.assertEqual(nums, list(range(1, total + 1)), counts)

            # seat 1 sits at global position half - 1
            half = (total + 1) // 2
            flat = [(b.id, i) for b in blocks for i in range(b.column_count)]
            block_id, index = flat[half - 1]
            one = [s for s in m.elements() if isinstance(s, Seat) and s.column_number == 1]
            self.assertEqual(len(one), 1)
            self.assertEqual((one[0].host, one[0].column_index), (block_id, index), counts)

    def test_evens_left_odds_right(self):
        m, _, blocks = number([3, 4, 2], NumberingPolicy.center_split)
        row = [labels(m, b)[i] for b in blocks for i in range(b.column_count)]
        self.assertEqual(row, [8, 6, 4, 2, 1, 3, 5, 7, 9])

    def test_even_total_follows_half_formula(self):
        # N = 8, half = 4: seat 1 is the last seat of the first block
        m, _, (first, second) = number([4, 4], NumberingPolicy.center_split)
        self.assertEqual(labels(m, first), {3: 1, 2: 2, 1: 4, 0: 6})
        self.assertEqual(labels(m, second), {0: 3, 1: 5, 2: 7, 3: 9})

    def test_boundary_match_is_reported_and_keeps_a_valid_center(self):
        messages = []
        sink = logger.add(messages.append, level="WARNING")
        try:
            m, _, (first, second) = number([3, 3], NumberingPolicy.center_split)
        finally:
            logger.remove(sink)
        self.assertTrue(any("boundary" in str(msg) for msg in messages))
        self.assertEqual(labels(m, first), {2: 1, 1: 2, 0: 4})
        self.assertEqual(labels(m, second), {0: 3, 1: 5, 2: 7})

    def test_zero_block_between(self):
        m, _, (a, empty, b) = number([2, 0, 2], NumberingPolicy.center_split)
        self.assertEqual(labels(m, a), {1: 1, 0: 2})
        self.assertEqual(labels(m, empty), {})
        self.assertEqual(labels(m, b), {0: 3, 1: 5})


class TestDegenerateAndReserved(unittest.TestCase):
    def test_zero_column_block_is_skipped(self):
        m, _, (a, empty, b) = number([2, 0, 3], NumberingPolicy.ascending)
        self.assertEqual(labels(m, a), {0: 1, 1: 2})
        self.assertEqual(labels(m, empty), {})
        self.assertEqual(labels(m, b), {0: 3, 1: 4, 2: 5})

    def test_all_empty(self):
        for policy in NumberingPolicy:
            m, _, _ = number([0, 0], policy)
            self.assertEqual(len(m), 3)

    def test_reserved_policy_is_noop(self):
        m = VenueModel()
        row, _ = make_row(m, [4, 4])
        before = len(m)
        self.assertEqual(assign_numbers(m, row, NumberingPolicy.reserved, settings=SETTINGS), [])
        self.assertEqual(len(m), before)

    def test_unknown_policy_rejected(self):
        with self.assertRaises(ValueError):
            plan_numbers([], "zigzag")

    def test_wrong_kind_is_noop(self):
        m = VenueModel()
        _, (block,) = make_row(m, [4])
        before = len(m)
        self.assertEqual(assign_numbers(m, block, "ascending", settings=SETTINGS), [])
        self.assertEqual(clear_numbers(m, block), 0)
        self.assertEqual(len(m), before)


class TestSeatRecords(unittest.TestCase):
    def test_attributes(self):
        m = VenueModel()
        row, (block,) = make_row(m, [3], row_name="7排")
        seats = assign_numbers(m, row, "ascending", 180, settings=SETTINGS)
        third = seats[2]
        self.assertEqual(third.label, "3")
        self.assertEqual(third.column_number, 3)
        self.assertEqual(third.column_name, "3号")
        self.assertEqual(third.row_column_name, "7排3号")
        self.assertEqual(third.status, SeatStatus.unassigned)
        self.assertEqual(third.price, 180)
        self.assertEqual((third.host, third.parent, third.row_index), (block.id, block.id, 0))
        self.assertFalse(third.movable)

    def test_default_price_from_settings(self):
        m = VenueModel()
        row, _ = make_row(m, [2])
        seats = assign_numbers(m, row, "ascending", settings=SeatPlanSettings(default_price=280))
        self.assertEqual({s.price for s in seats}, {280})

    def test_attributes_are_plain_values(self):
        m, _, _ = number([2], NumberingPolicy.ascending)
        for seat in (e for e in m.elements() if isinstance(e, Seat)):
            for value in element_to_dict(seat).values():
                self.assertIsInstance(value, (str, int, float, bool, type(None)))

    def test_column_index_unique_per_block(self):
        for policy in ("ascending", "descending", "center_split"):
            m, _, blocks = number([3, 5, 2], policy)
            for b in blocks:
                idx = [s.column_index for s in m.hosted_by(b.id)]
                self.assertEqual(sorted(idx), list(range(b.column_count)), policy)

    def test_plan_is_pure(self):
        block = GridBlock(id=5, center_x=0, center_y=0, column_count=2)
        self.assertEqual(plan_numbers([block], "ascending"), [SeatSlot(5, 0, 1), SeatSlot(5, 1, 2)])
        self.assertIsNone(block.parent)


class TestClear(unittest.TestCase):
    def test_clear_removes_only_seats(self):
        m, row, blocks = number([2, 3], NumberingPolicy.ascending)
        self.assertEqual(clear_numbers(m, row), 5)
        self.assertEqual(len(m), 3)
        for b in blocks:
            self.assertIn(b.id, m)

    def test_numbering_does_not_auto_clear(self):
        m, row, _ = number([2], NumberingPolicy.ascending)
        assign_numbers(m, row, "ascending", settings=SETTINGS)
        self.assertEqual(sum(isinstance(e, Seat) for e in m.elements()), 4)

    def test_clear_then_renumber_matches_fresh_row(self):
        counts = [4, 5]

        def layout(m, blocks):
            pos = {b.id: i for i, b in enumerate(blocks)}
            return sorted(
                (pos[s.host], s.column_index, s.column_number, s.row_column_name)
                for s in m.elements()
                if isinstance(s, Seat)
            )

        m, row, blocks = number(counts, NumberingPolicy.ascending)
        clear_numbers(m, row)
        assign_numbers(m, row, "center_split", settings=SETTINGS)

        fresh, _, fresh_blocks = number(counts, NumberingPolicy.center_split)
        self.assertEqual(layout(m, blocks), layout(fresh, fresh_blocks))


if __name__ == "__main__":
    unittest.main()
