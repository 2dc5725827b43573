"""
VITAE - Asset pipeline and single-file packager for a résumé website

Builds the front-end assets of a PHP-rendered résumé site and packages the
rendered page into one standalone HTML document.

Architecture:
- Assets Context: Sass, TypeScript and service-worker compilation, vendor fonts, minification
- Packaging Context: Single-file HTML output with inlined, purged CSS and embedded fonts
- Serving Context: Development server, Composer actions, file watching
- Pipeline: Task graph (series/parallel) shared by the CLI and the watchers
"""

__version__ = "0.1.0"
