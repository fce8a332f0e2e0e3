"""
Sequence builtins. Sequences are tuples; every builtin returns a new one.

`map`, `filter` and `fold` are lazy builtins: they hand each call of the
user function back to the evaluator as an `Apply` request.
"""

from ..runtime.values import format_value, is_number, type_name, values_equal
from ..shared.errors import TypeMismatch
from .operators import add, exclusive_range, inclusive_range, mul
from .registry import Apply, builtin, expect_int, expect_sequence, expect_string


def _items(value, who):
    if isinstance(value, str):
        return tuple(value)
    return expect_sequence(value, who)


def _non_empty(value, who):
    items = _items(value, who)
    if not items:
        raise TypeMismatch(f"`{who}` of an empty sequence")
    return items


builtin("range")(exclusive_range)
builtin("rangei")(inclusive_range)


@builtin("length")
def length(sequence):
    return len(_items(sequence, "length"))


@builtin("is_empty")
def is_empty(sequence):
    return not _items(sequence, "is_empty")


@builtin("nth")
def nth(sequence, index):
    items = _items(sequence, "nth")
    i = expect_int(index, "nth")
    if not -len(items) <= i < len(items):
        raise TypeMismatch(f"index {i} out of range for a sequence of length {len(items)}")
    return items[i]


@builtin("head")
def head(sequence):
    return _non_empty(sequence, "head")[0]


@builtin("last")
def last(sequence):
    return _non_empty(sequence, "last")[-1]


@builtin("tail")
def tail(sequence):
    return _non_empty(sequence, "tail")[1:]


@builtin("init")
def init(sequence):
    return _non_empty(sequence, "init")[:-1]


@builtin("take")
def take(count, sequence):
    return _items(sequence, "take")[:max(expect_int(count, "take"), 0)]


@builtin("drop")
def drop(count, sequence):
    return _items(sequence, "drop")[max(expect_int(count, "drop"), 0):]


@builtin("reverse")
def reverse(sequence):
    return _items(sequence, "reverse")[::-1]


@builtin("contains")
def contains(sequence, item):
    return any(values_equal(element, item) for element in _items(sequence, "contains"))


@builtin("slice")
def slice_sequence(start, end, sequence):
    """Items from `start` up to but not including `end`; negative indices count from the back."""
    return _items(sequence, "slice")[expect_int(start, "slice"):expect_int(end, "slice")]


@builtin("index_of")
def index_of(sequence, item):
    """First index of `item`, or -1 when it is absent."""
    for index, element in enumerate(_items(sequence, "index_of")):
        if values_equal(element, item):
            return index
    return -1


@builtin("unique")
def unique(sequence):
    """Drop repeated items, keeping the first of each."""
    kept = []
    for item in _items(sequence, "unique"):
        if not any(values_equal(item, seen) for seen in kept):
            kept.append(item)
    return tuple(kept)


def _comparable(items, who):
    if all(is_number(item) for item in items) or all(isinstance(item, str) for item in items):
        return items
    found = ", ".join(sorted({type_name(item) for item in items}))
    raise TypeMismatch(f"`{who}` needs all Numbers or all Strings, found {found}")


@builtin("sort")
def sort(sequence):
    return tuple(sorted(_comparable(_items(sequence, "sort"), "sort")))


@builtin("min_of")
def min_of(sequence):
    return min(_comparable(_non_empty(sequence, "min_of"), "min_of"))


@builtin("max_of")
def max_of(sequence):
    return max(_comparable(_non_empty(sequence, "max_of"), "max_of"))


@builtin("intersperse")
def intersperse(separator, sequence):
    result = []
    for index, item in enumerate(_items(sequence, "intersperse")):
        if index:
            result.append(separator)
        result.append(item)
    return tuple(result)


@builtin("join", "intercalate")
def join(separator, sequence):
    """Concatenate a sequence of Strings with `separator` between them."""
    separator = expect_string(separator, "join")
    return separator.join(expect_string(item, "join") for item in expect_sequence(sequence, "join"))


@builtin("split")
def split(separator, text):
    separator = expect_string(separator, "split")
    if not separator:
        raise TypeMismatch("`split` separator must not be empty")
    return tuple(expect_string(text, "split").split(separator))


@builtin("prepend")
def prepend(item, sequence):
    return (item,) + expect_sequence(sequence, "prepend")


@builtin("append")
def append(sequence, item):
    return expect_sequence(sequence, "append") + (item,)


@builtin("sum")
def total(sequence):
    result = 0
    for item in expect_sequence(sequence, "sum"):
        result = add(result, item)
    return result


@builtin("product")
def product(sequence):
    result = 1
    for item in expect_sequence(sequence, "product"):
        result = mul(result, item)
    return result


@builtin("flatten")
def flatten(sequence):
    result = ()
    for item in expect_sequence(sequence, "flatten"):
        result += item if isinstance(item, tuple) else (item,)
    return result


@builtin("map", lazy=True)
def map_sequence(function, sequence):
    results = []
    for item in _items(sequence, "map"):
        results.append((yield Apply(function, (item,))))
    return tuple(results)


@builtin("filter", lazy=True)
def filter_sequence(predicate, sequence):
    kept = []
    for item in _items(sequence, "filter"):
        keep = yield Apply(predicate, (item,))
        if not isinstance(keep, bool):
            raise TypeMismatch(f"`filter` predicate returned {type_name(keep)} for {format_value(item)}, expected a Boolean")
        if keep:
            kept.append(item)
    return tuple(kept)


@builtin("fold", lazy=True)
def fold(function, initial, sequence):
    accumulator = initial
    for item in _items(sequence, "fold"):
        accumulator = yield Apply(function, (accumulator, item))
    return accumulator
