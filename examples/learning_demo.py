"""
Learning Demonstration for the Chunk Network

Presents a short stream of letter sequences to a Memory and shows how the
network grows: primitives first, then branches, then images that fill in
until whole words are recalled.
"""

import logging
from io import StringIO

from chunknet import ListPattern, Memory, Modality, dumps, loads


def print_section(title):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def word(text, modality=Modality.VISUAL):
    return ListPattern.of(text, modality=modality, finished=True)


def demonstrate_learning(memory):
    """Learn a few words until each is recalled."""
    print_section("LEARNING A STREAM OF WORDS")

    words = ["cat", "car", "cart", "dog"]
    for trial in range(1, 11):
        for text in words:
            memory.learn(word(text))
        recalled = [str(memory.recalls(word(text))) for text in words]
        print(f"  trial {trial:2d}: nodes={len(memory.network):3d}  " + "  ".join(recalled))

    for text in words:
        status = "✓" if memory.recalls(word(text)) == word(text) else "partial"
        print(f"  {text:5s} -> {memory.recalls(word(text))}  {status}")


def demonstrate_naming(memory):
    """Link a visual chunk to the verbal chunk that names it."""
    print_section("NAMING")

    for _ in range(4):
        memory.learn(word("CAT", Modality.VERBAL))
    seen = memory.recognise(word("cat"))
    name = memory.recognise(word("CAT", Modality.VERBAL))
    memory.name(seen, name)
    named_by = memory.network.node(seen).named_by
    print(f"  {memory.network.node(seen).image} is named by {memory.network.node(named_by).image}")


def demonstrate_statistics(memory):
    """Print size and depth statistics."""
    print_section("STATISTICS")

    stats = memory.statistics()
    print(f"  total nodes: {stats['total_nodes']}")
    print(f"  clock:       {stats['clock']:.0f}")
    for modality, data in stats["modalities"].items():
        print(f"  {modality:7s} size={data['size']:3d}  "
              f"average depth={data['average_depth']:.2f}  "
              f"leaves by depth={data['depth_histogram']}")


def demonstrate_persistence(memory):
    """Write the network out and read it back."""
    print_section("PERSISTENCE")

    text = dumps(memory.network)
    restored = Memory(network=loads(text))
    print(f"  wrote {len(text.splitlines())} node lines")
    print(f"  restored network recalls 'cart' as {restored.recalls(word('cart'))}")
    print("  first lines:")
    for line in StringIO(text).readlines()[:3]:
        print("    " + line.rstrip()[:100] + ("..." if len(line) > 100 else ""))


def main():
    logging.basicConfig(level=logging.INFO, format='%(asctime)s | %(name)s | %(message)s',
                        datefmt='%H:%M:%S')

    memory = Memory()
    demonstrate_learning(memory)
    demonstrate_naming(memory)
    demonstrate_statistics(memory)
    demonstrate_persistence(memory)
    print()


if __name__ == "__main__":
    main()
