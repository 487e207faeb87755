"""
Tests for the reference learning model
"""

import pytest

from chunknet import LearningModel, ListPattern, Memory, Modality, TimingConfig


def pat(*items, finished=False, modality=Modality.VISUAL):
    return ListPattern.of(items, modality=modality, finished=finished)


class TestTimingConfig:
    def test_defaults(self):
        timing = TimingConfig()
        assert timing.discrimination_time == 10000
        assert timing.familiarisation_time == 2000

    def test_negative_times_rejected(self):
        with pytest.raises(ValueError):
            TimingConfig(discrimination_time=-1)
        with pytest.raises(ValueError):
            TimingConfig(familiarisation_time=-5)

    def test_memory_uses_timing(self):
        memory = Memory(timing=TimingConfig(discrimination_time=7, familiarisation_time=3))
        assert memory.discrimination_time() == 7
        assert memory.familiarisation_time() == 3


class TestLearningModel:
    def test_interface_is_abstract(self):
        with pytest.raises(TypeError):
            LearningModel()

    def test_memory_is_a_learning_model(self):
        assert isinstance(Memory(), LearningModel)


class TestRecognise:
    def test_unknown_pattern_reaches_root(self):
        memory = Memory()
        assert memory.recognise(pat("A")) == memory.root_for(Modality.VISUAL)

    def test_modalities_kept_apart(self):
        memory = Memory()
        memory.learn(pat("A", finished=True))
        verbal = pat("A", finished=True, modality=Modality.VERBAL)
        assert memory.recognise(verbal) == memory.root_for(Modality.VERBAL)

    def test_follows_links(self):
        memory = Memory()
        a = memory.learn(pat("A", "B", finished=True))
        assert memory.recognise(pat("A", "C")) == a
        assert memory.recognise(pat("B")) == memory.root_for(Modality.VISUAL)


class TestLearn:
    def test_learn_until_recalled(self):
        memory = Memory()
        target = pat("A", "B", finished=True)
        for _ in range(6):
            memory.learn(target)

        assert memory.recalls(target) == target
        assert memory.network.size(memory.root_for(Modality.VISUAL)) == 4
        assert memory.clock == 3 * 10000 + 3 * 2000

    def test_learn_charges_clock_per_change(self):
        memory = Memory()
        memory.learn(pat("A", finished=True))
        assert memory.clock == memory.discrimination_time()

    def test_learn_returns_resulting_node(self):
        memory = Memory()
        handle = memory.learn(pat("X", "Y", finished=True))
        assert memory.network.node(handle).image == pat("X", finished=True)

    def test_name_and_sequence(self):
        memory = Memory()
        seen = memory.learn(pat("A", finished=True))
        word = memory.learn(pat("a", finished=True, modality=Modality.VERBAL))
        after = memory.learn(pat("B", finished=True))

        memory.name(seen, word)
        memory.sequence(seen, after)

        node = memory.network.node(seen)
        assert node.named_by == word
        assert node.followed_by == after


class TestStatistics:
    def test_statistics(self):
        memory = Memory()
        memory.learn(pat("A", finished=True))
        memory.learn(pat("B", finished=True))

        stats = memory.statistics()
        assert stats["total_nodes"] == len(Modality) + 2
        assert stats["clock"] == 2 * 10000
        visual = stats["modalities"]["visual"]
        assert visual["size"] == 3
        assert visual["average_depth"] == 1.0
        assert visual["depth_histogram"] == [0, 2]
        assert stats["modalities"]["action"]["average_depth"] == 0.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
