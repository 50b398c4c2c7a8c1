"""Orchestration layer — mode state machine, plugin lifecycle managers,
configuration resolver and in-flight request tracking.

Import from the submodules directly; ``tapedeck.config`` depends on
``tapedeck.orchestration.modes`` and this package stays import-free to
keep that edge acyclic.
"""
