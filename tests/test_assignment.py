import pytest

from pmac0.assignment import WorkAssignment, pad_length_for, padded_length, split_assignments


@pytest.mark.parametrize("length", [0, 1, 2, 3, 7, 10, 64, 101])
@pytest.mark.parametrize("workers", [1, 2, 3, 5, 17])
def test_padded_length_is_multiple_of_worker_count(length, workers):
    pad = pad_length_for(length, workers)
    assert 0 <= pad < workers
    assert (length + 1 + pad) % workers == 0
    assert padded_length(length, workers) == length + 1 + pad


def test_empty_file_three_workers_needs_two_pad_blocks():
    assert pad_length_for(0, 3) == 2
    assignments = split_assignments(0, 3)
    assert [a.block_count for a in assignments] == [0, 0, 3]
    assert list(assignments[2].offsets()) == []


def test_single_worker_is_sequential():
    a = WorkAssignment(0, 1, 5)
    assert a.is_last
    assert list(a.offsets()) == [0, 1, 2, 3, 4]
    assert a.pad_length == 0
    assert a.block_count == 6


def test_strided_offsets():
    assert list(WorkAssignment(1, 3, 10).offsets()) == [1, 4, 7]
    assert list(WorkAssignment(2, 3, 10).offsets()) == [2, 5, 8]


@pytest.mark.parametrize("length", [0, 1, 4, 9, 33])
@pytest.mark.parametrize("workers", [1, 2, 4, 5, 17])
def test_offsets_partition_the_file(length, workers):
    assignments = split_assignments(length, workers)
    seen = []
    for a in assignments:
        offsets = list(a.offsets())
        assert len(offsets) == a.real_block_count
        seen.extend(offsets)
    assert sorted(seen) == list(range(length))
    assert sum(a.block_count for a in assignments) == padded_length(length, workers)


def test_last_worker_pads_even_without_real_bytes():
    # W > L: rank 4 owns no byte but still appends marker and padding
    last = WorkAssignment(4, 5, 2)
    assert last.is_last
    assert last.real_block_count == 0
    assert last.pad_length == 2
    assert last.block_count == 3


def test_only_last_worker_pads():
    assignments = split_assignments(7, 4)
    assert [a.pad_length for a in assignments] == [0, 0, 0, 0]
    assignments = split_assignments(6, 4)
    assert [a.pad_length for a in assignments] == [0, 0, 0, 1]


@pytest.mark.parametrize("rank,workers,length", [(-1, 3, 0), (3, 3, 0), (0, 0, 0), (0, 1, -1)])
def test_invalid_assignment(rank, workers, length):
    with pytest.raises(ValueError):
        WorkAssignment(rank, workers, length)
