"""
High-level API for PSD templates.

Key modules:

- :py:mod:`psd_compose.api.document`: :py:class:`Document` and the layer tree
- :py:mod:`psd_compose.api.layers`: layer node types
- :py:mod:`psd_compose.api.typesetting`: style runs of type layers
- :py:mod:`psd_compose.api.directives`: ``{{KEY}}`` and ``[NAME]`` layer names
- :py:mod:`psd_compose.api.style`: style resolution for replacement text
- :py:mod:`psd_compose.api.regions`: region geometry
- :py:mod:`psd_compose.api.render`: rendering entry points
- :py:mod:`psd_compose.api.templates`: template directories with overlays
"""
