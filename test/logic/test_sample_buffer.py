"""Tests for SampleBufferAdapter: per-channel isolation of malformed data."""

import numpy as np
import pytest

from scopesync.acq import SampleBufferAdapter


@pytest.fixture
def adapter():
    return SampleBufferAdapter(num_samples=3)


def test_reset_zero_fills_six_channels(adapter):
    labels, buffers = adapter.frame()
    assert list(labels) == [0, 1, 2]
    assert len(buffers) == 6
    assert all(np.array_equal(b, np.zeros(3)) for b in buffers)

    adapter.reset(5)
    labels, buffers = adapter.frame()
    assert len(labels) == 5
    assert all(len(b) == 5 for b in buffers)


def test_full_frame(adapter):
    payload = {"channels": [[i, i + 1, i + 2] for i in range(6)]}
    assert adapter.update(payload)
    _, buffers = adapter.frame()
    for i, b in enumerate(buffers):
        assert list(b) == [i, i + 1, i + 2]


def test_malformed_channel_leaves_others(adapter):
    adapter.update({"channels": [[7, 7, 7]] * 6})
    payload = {
        "channels": [
            [1, 2, 3],
            "garbage",
            [4, 5, 6],
            [[1, 2], [3, 4]],
            ["a", "b"],
            None,
        ]
    }
    assert adapter.update(payload)
    _, buffers = adapter.frame()
    assert list(buffers[0]) == [1, 2, 3]
    assert list(buffers[1]) == [7, 7, 7]
    assert list(buffers[2]) == [4, 5, 6]
    assert list(buffers[3]) == [7, 7, 7]
    assert list(buffers[4]) == [7, 7, 7]
    assert list(buffers[5]) == [7, 7, 7]


def test_short_and_long_channel_lists(adapter):
    assert adapter.update({"channels": [[1, 1, 1], [2, 2, 2]]})
    _, buffers = adapter.frame()
    assert list(buffers[1]) == [2, 2, 2]
    assert list(buffers[2]) == [0, 0, 0]

    assert adapter.update({"channels": [[9, 9, 9]] * 8})
    _, buffers = adapter.frame()
    assert len(buffers) == 6
    assert all(list(b) == [9, 9, 9] for b in buffers)


@pytest.mark.parametrize(
    "payload", [None, [], "channels", {"data": []}, {"channels": "abc"}]
)
def test_unrecognized_payload_changes_nothing(adapter, payload):
    adapter.update({"channels": [[3, 3, 3]] * 6})
    assert not adapter.update(payload)
    _, buffers = adapter.frame()
    assert all(list(b) == [3, 3, 3] for b in buffers)


def test_frame_returns_copy_of_buffer_list(adapter):
    _, buffers = adapter.frame()
    buffers.clear()
    assert len(adapter.frame()[1]) == 6
