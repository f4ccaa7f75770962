"""
Launchpad - launch and supervise parameterised Python scripts.

A target script declares its parameters as the signature of an
entrypoint function; a JSON or YAML parameter file supplies the values.
Launchpad binds the two, runs the target in an isolated worker process,
and turns every failure into a diagnostic artifact plus an operator
notification.
"""

__version__ = "0.1.0"
