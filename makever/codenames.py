"""
Random codenames for versions released without one.
"""
import random

ADJECTIVES = (
    "agile", "amber", "ancient", "autumn", "bold", "brave", "bright", "calm",
    "clever", "cosmic", "crimson", "curious", "daring", "dusty", "eager", "electric",
    "fancy", "fearless", "gentle", "golden", "happy", "hidden", "humble", "icy",
    "jolly", "keen", "lively", "lucky", "mellow", "misty", "noble", "proud",
    "quiet", "rapid", "silent", "silver", "sunny", "swift", "tidy", "vivid",
    "wandering", "wild", "wise", "young", "zesty",
)

NOUNS = (
    "anchor", "badger", "beacon", "breeze", "canyon", "comet", "coral", "falcon",
    "fern", "forest", "fox", "glacier", "harbor", "heron", "island", "jaguar",
    "lagoon", "lantern", "maple", "meadow", "meteor", "moose", "nebula", "otter",
    "panda", "pebble", "phoenix", "prairie", "raven", "reef", "river", "rocket",
    "sparrow", "summit", "thunder", "tiger", "tundra", "valley", "voyager", "walrus",
    "willow", "wolf", "yak", "zephyr",
)


def generate(separator="-", *, rng=random):
    """
    Return a random ``adjective<separator>noun`` codename.

    Whitespace inside words is replaced with `separator`. `rng` may be any
    object with a ``choice`` method (a seeded ``random.Random`` in tests).
    """
    adjective = separator.join(rng.choice(ADJECTIVES).split())
    noun = separator.join(rng.choice(NOUNS).split())
    return separator.join((adjective, noun))


__all__ = (
    "ADJECTIVES",
    "NOUNS",
    "generate",
)
