import random

import pytest

from core.entropy import (ScriptedEntropy, SeededEntropy, SystemEntropy,
                          choice, create_entropy)
from core.errors import EntropyExhausted


def test_seeded_entropy_is_reproducible():
    a = SeededEntropy(99)
    b = SeededEntropy(99)
    assert [a.next_sample() for _ in range(50)] == [b.next_sample() for _ in range(50)]


def test_seeded_entropy_differs_across_seeds():
    a = SeededEntropy(1)
    b = SeededEntropy(2)
    assert [a.next_sample() for _ in range(10)] != [b.next_sample() for _ in range(10)]


def test_sources_do_not_touch_global_random_state():
    random.seed(1)
    expected = random.random()

    random.seed(1)
    seeded = SeededEntropy(5)
    system = SystemEntropy()
    for _ in range(10):
        seeded.next_sample()
        system.next_sample()
    assert random.random() == expected


@pytest.mark.parametrize("source", [SeededEntropy(7), SystemEntropy()])
def test_samples_are_in_unit_interval(source):
    for _ in range(1000):
        value = source.next_sample()
        assert 0.0 <= value < 1.0


def test_scripted_entropy_replays_in_order():
    entropy = ScriptedEntropy([0.1, 0.5, 0.9])
    assert [entropy.next_sample() for _ in range(3)] == [0.1, 0.5, 0.9]
    assert entropy.remaining == 0


def test_scripted_entropy_exhaustion_raises():
    entropy = ScriptedEntropy([0.2])
    entropy.next_sample()
    with pytest.raises(EntropyExhausted):
        entropy.next_sample()


@pytest.mark.parametrize("bad", [1.0, -0.01, 2])
def test_scripted_entropy_rejects_out_of_range_samples(bad):
    with pytest.raises(ValueError):
        ScriptedEntropy([0.5, bad])


def test_choice_maps_sample_to_index():
    entropy = ScriptedEntropy([0.0, 0.5, 0.99])
    options = ('parser', 'validator', 'executor')
    assert [choice(entropy, options) for _ in range(3)] == ['parser', 'validator', 'executor']


def test_choice_rejects_empty_sequence():
    with pytest.raises(ValueError):
        choice(SeededEntropy(1), [])


def test_create_entropy_picks_source_by_seed():
    assert isinstance(create_entropy(None), SystemEntropy)
    seeded = create_entropy(11)
    assert isinstance(seeded, SeededEntropy)
    assert seeded.seed == 11
    assert repr(seeded) == "SeededEntropy(seed=11)"
