"""A damped oscillator sample, x(t) = amplitude * decay^t * cos(omega * t + phase).

Built with operator overloading: plain numbers become constants. The
quadrature component shares the envelope subexpression with the position.
"""

import compgraph as cg

t = cg.create_input("t")
amplitude = cg.create_input_with("amplitude", 2.0)
omega = cg.create_input_with("omega", 3.0)
phase = cg.create_input_with("phase", 0.0)
decay = cg.create_constant(0.5)

envelope = amplitude * decay**t
quadrature = -1 * envelope * cg.sine(omega * t + phase)
position = envelope * cg.cosine(omega * t + phase)
