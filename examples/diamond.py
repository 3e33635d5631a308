"""Diamond-shaped graph.

Both `f` and `g` depend on `x`, and `h` depends on both of them. `x` is
shared: it is resolved once no matter how many nodes depend on it.

Run with:
    autodag resolve examples/diamond.py -n h
    autodag tree examples/diamond.py -n h
"""

import autodag as ad

graph = ad.Graph("diamond")

# -----------------------------------------------------------------------------
# Values
# -----------------------------------------------------------------------------

graph.value("x", 1)


# -----------------------------------------------------------------------------
# Computations (dependency names come from the parameter names)
# -----------------------------------------------------------------------------


@graph.computation()
def f(x: int) -> int:
    return x + 1


@graph.computation()
def g(x: int) -> int:
    return x * 2


@graph.computation()
def h(f: int, g: int) -> int:
    return f + g


if __name__ == "__main__":
    print(graph.run_sync("h"))  # 4
