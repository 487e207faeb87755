"""
Tests for writing and reading network descriptions
"""

from io import StringIO
import sys

import pytest

from chunknet import (
    ListPattern,
    Memory,
    Modality,
    ParseError,
    dumps,
    loads,
    read_node,
    write_node,
)


def pat(*items, finished=False, modality=Modality.VISUAL):
    return ListPattern.of(items, modality=modality, finished=finished)


EMPTY_VISUAL = ("<pattern><modality>visual</modality>"
                "<finished>false</finished></pattern>")


@pytest.fixture
def trained():
    memory = Memory()
    for _ in range(6):
        memory.learn(pat("A", "B", finished=True))
    memory.learn(pat("C", 3, finished=True))
    memory.learn(pat("hello", finished=True, modality=Modality.VERBAL))
    seen = memory.recognise(pat("A", "B", finished=True))
    word = memory.recognise(pat("hello", finished=True, modality=Modality.VERBAL))
    memory.name(seen, word)
    memory.sequence(seen, memory.recognise(pat("C")))
    return memory


class TestWrite:
    def test_root_line(self):
        memory = Memory()
        buffer = StringIO()
        write_node(memory.network, memory.root_for(Modality.VISUAL), buffer)
        assert buffer.getvalue() == (
            "<node><reference>0</reference>"
            f"<contents>{EMPTY_VISUAL}</contents>"
            f"<image>{EMPTY_VISUAL}</image>"
            "</node>\n"
        )

    def test_children_written_in_preorder(self, trained):
        network = trained.network
        buffer = StringIO()
        root = trained.root_for(Modality.VISUAL)
        write_node(network, root, buffer)

        written = [int(line.split("</reference>")[0].split("<reference>")[1])
                   for line in buffer.getvalue().splitlines()]

        expected = []

        def preorder(handle):
            expected.append(handle)
            for link in network.node(handle).children:
                preorder(link.child)

        preorder(root)
        assert written == expected

    def test_optional_sections(self, trained):
        seen = trained.recognise(pat("A", "B", finished=True))
        buffer = StringIO()
        write_node(trained.network, seen, buffer)
        line = buffer.getvalue().splitlines()[0]
        assert "<named-by><reference>" in line
        assert "<followed-by><reference>" in line
        assert "<children>" not in line

    def test_unsupported_item(self):
        memory = Memory()
        root = memory.root_for(Modality.VISUAL)
        memory.network.learn_primitive(memory, root, pat(1.5, finished=True))
        with pytest.raises(TypeError):
            dumps(memory.network)


class TestRoundTrip:
    def test_network_round_trip(self, trained):
        original = trained.network
        restored = loads(dumps(original))

        assert len(restored) == len(original)
        assert restored.roots == original.roots
        for before in original:
            after = restored.node(before.reference)
            assert after.contents == before.contents
            assert after.image == before.image
            assert [(l.test, l.child) for l in after.children] == \
                [(l.test, l.child) for l in before.children]
            assert after.followed_by == before.followed_by
            assert after.named_by == before.named_by

    def test_restored_network_keeps_learning(self, trained):
        restored = Memory(network=loads(dumps(trained.network)))
        count = len(restored.network)

        handle = restored.learn(pat("Q", finished=True))

        assert handle == count
        assert restored.recognise(pat("A", "B", finished=True)) == \
            trained.recognise(pat("A", "B", finished=True))

    def test_markup_in_items(self):
        memory = Memory()
        root = memory.root_for(Modality.VISUAL)
        memory.network.learn_primitive(memory, root, pat("<a&b>", finished=True))
        restored = loads(dumps(memory.network))
        assert restored.node(len(Modality)).image == pat("<a&b>", finished=True)

    def test_whitespace_items(self):
        memory = Memory()
        root = memory.root_for(Modality.VISUAL)
        for item in (" ", "\n", " a "):
            memory.network.learn_primitive(memory, root, pat(item, finished=True))

        restored = loads(dumps(memory.network))

        for before in memory.network:
            after = restored.node(before.reference)
            assert after.contents == before.contents
            assert after.image == before.image
        assert restored.node(len(Modality)).image == pat(" ", finished=True)
        assert restored.node(len(Modality) + 1).image == pat("\n", finished=True)

    def test_whitespace_between_tags_ignored(self):
        text = ("<node> <reference>0</reference>\n<contents>" + EMPTY_VISUAL +
                "</contents>\n  <image>" + EMPTY_VISUAL + "</image>\n</node>\n")
        record = read_node(StringIO(text))
        assert record.reference == 0
        assert record.image == pat()

    def test_long_chain_round_trip(self):
        memory = Memory()
        root = memory.root_for(Modality.VISUAL)
        depth = sys.getrecursionlimit() + 100
        handle = root
        for i in range(depth):
            handle = memory.network.learn_primitive(memory, handle, pat(i, finished=True))

        restored = loads(dumps(memory.network))

        assert len(restored) == len(memory.network)
        assert list(restored.preorder(root)) == list(memory.network.preorder(root))
        assert restored.node(handle).image == pat(depth - 1, finished=True)

    def test_read_single_node(self, trained):

        seen = trained.recognise(pat("A", "B", finished=True))
        buffer = StringIO()
        write_node(trained.network, seen, buffer)

        record = read_node(StringIO(buffer.getvalue()))

        node = trained.network.node(seen)
        assert record.reference == seen
        assert record.contents == node.contents
        assert record.image == node.image
        assert record.named_by == node.named_by
        assert record.followed_by == node.followed_by
        assert record.links == []


class TestMalformed:
    @pytest.mark.parametrize("text", [
        "",
        "<node><reference>0</reference>",
        "<node><reference>zero</reference></node>",
        "<node><reference>0</reference><contents><pattern><modality>smell</modality>"
        "<finished>false</finished></pattern></contents></node>",
        f"<node><reference>0</reference><contents>{EMPTY_VISUAL}</contents>"
        f"<image>{EMPTY_VISUAL}</image></node><node>",
        f"<node><reference>0</reference><contents>{EMPTY_VISUAL}</contents>"
        "<image><pattern><modality>visual</modality><finished>maybe</finished>"
        "</pattern></image></node>",
    ])
    def test_read_node_rejects(self, text):
        with pytest.raises(ParseError):
            read_node(StringIO(text))

    def test_parse_error_is_value_error(self):
        assert issubclass(ParseError, ValueError)

    def test_link_to_unknown_node(self):
        text = (f"<node><reference>0</reference><contents>{EMPTY_VISUAL}</contents>"
                f"<image>{EMPTY_VISUAL}</image><children><link><test>{EMPTY_VISUAL}</test>"
                "<reference>5</reference></link></children></node>\n")
        with pytest.raises(ParseError):
            loads(text)

    def test_duplicate_reference(self):
        line = (f"<node><reference>0</reference><contents>{EMPTY_VISUAL}</contents>"
                f"<image>{EMPTY_VISUAL}</image></node>\n")
        with pytest.raises(ParseError):
            loads(line + line)

    def test_missing_reference(self):
        line = (f"<node><reference>1</reference><contents>{EMPTY_VISUAL}</contents>"
                f"<image>{EMPTY_VISUAL}</image></node>\n")
        with pytest.raises(ParseError):
            loads(line)

    def test_two_roots_for_one_modality(self):
        text = "".join(
            f"<node><reference>{i}</reference><contents>{EMPTY_VISUAL}</contents>"
            f"<image>{EMPTY_VISUAL}</image></node>\n"
            for i in range(2)
        )
        with pytest.raises(ParseError):
            loads(text)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
