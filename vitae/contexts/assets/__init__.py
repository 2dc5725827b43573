"""
Assets Context

Responsibilities:
- Compiles Sass to CSS and TypeScript to JavaScript
- Compiles and minifies the service worker
- Copies vendor font files
- Minifies the compiled bundles

Owns: Everything written to the dist directory, sw.js, public/fonts
Never: Renders HTML or inlines assets into pages
"""

from vitae.contexts.assets.compiler import (
    compile_sass,
    compile_service_worker,
    compile_typescript,
)
from vitae.contexts.assets.minifier import (
    clean_minify,
    minify_app_script,
    minify_app_stylesheet,
)
from vitae.contexts.assets.tools import CompilationResult
from vitae.contexts.assets.vendor import copy_vendor_fonts

__all__ = [
    "CompilationResult",
    "compile_sass",
    "compile_typescript",
    "compile_service_worker",
    "copy_vendor_fonts",
    "clean_minify",
    "minify_app_script",
    "minify_app_stylesheet",
]
