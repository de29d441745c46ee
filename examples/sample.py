"""The sample expression: a + b * c.

Evaluate it with:

    compgraph calc examples/sample.py -i examples/sample.toml
"""

import compgraph as cg

a = cg.create_input("a")
b = cg.create_input("b")
c = cg.create_input("c")

# Changing a only recomputes the sum; b * c stays cached
expression = cg.add(a, cg.multiply(b, c))
