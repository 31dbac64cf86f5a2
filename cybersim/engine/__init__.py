"""
Simulation engine internals: clock, event bus, random source, registry,
event generator, scoring and the tick pipeline.
"""
