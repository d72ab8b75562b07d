"""Analysis services.

Import from the submodules directly; ``detection_config`` is shared with the
algorithms package, which ``analysis`` in turn depends on.
"""
