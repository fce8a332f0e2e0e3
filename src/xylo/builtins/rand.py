"""
Random builtins, all drawing from the run's seeded stream.

Names ending in `i` include the upper end: `randi` is 0 or 1,
`rand_rangei` a float in [low, high] and `randi_range` (alias
`randi_rangei`) an integer in [low, high].
"""

from .registry import builtin, expect_int, expect_real, expect_sequence

_UNIT_STEPS = 1 << 53


@builtin("rand", context=True)
def rand(ctx):
    """Uniform float in [0, 1)."""
    return ctx.random.random()


@builtin("randi", context=True)
def randi(ctx):
    return ctx.random.integer(0, 1)


@builtin("rand_range", context=True)
def rand_range(ctx, low, high):
    return ctx.random.uniform(expect_real(low, "rand_range"), expect_real(high, "rand_range"))


@builtin("rand_rangei", context=True)
def rand_range_inclusive(ctx, low, high):
    """Uniform float in [low, high]; one draw."""
    low, high = expect_real(low, "rand_rangei"), expect_real(high, "rand_rangei")
    fraction = ctx.random.integer(0, _UNIT_STEPS) / _UNIT_STEPS
    return low * (1.0 - fraction) + high * fraction


@builtin("randi_range", "randi_rangei", context=True)
def randi_range(ctx, low, high):
    """Integer in [low, high], both ends included."""
    return ctx.random.integer(expect_int(low, "randi_range"), expect_int(high, "randi_range"))


@builtin("rand_bool", context=True)
def rand_bool(ctx, probability):
    return ctx.random.random() < expect_real(probability, "rand_bool")


@builtin("choose", context=True)
def choose(ctx, sequence):
    return ctx.random.choice(expect_sequence(sequence, "choose"))


@builtin("shuffle", context=True)
def shuffle(ctx, sequence):
    return ctx.random.shuffled(expect_sequence(sequence, "shuffle"))


@builtin("noise", "noise2", context=True)
def noise(ctx, x, y):
    return ctx.noise.noise2(expect_real(x, "noise"), expect_real(y, "noise"))


@builtin("noise3", context=True)
def noise3(ctx, x, y, z):
    return ctx.noise.noise3(*(expect_real(v, "noise3") for v in (x, y, z)))
