"""Copy vendor assets (icon font files) from node_modules into the public tree."""

import shutil

from vitae.contexts.assets.logger import _log_debug, _log_success
from vitae.contexts.assets.tools import CompilationResult
from vitae.utils.config import BuildConfig


def copy_vendor_fonts(config: BuildConfig) -> CompilationResult:
    """
    Copy the configured font files from the font package to public/fonts.

    Missing files are reported as errors; the ones that exist are still copied.

    Args:
        config: Build configuration

    Returns:
        CompilationResult listing the copied files
    """
    config.vendor_fonts_dir.mkdir(parents=True, exist_ok=True)
    copied = []
    errors = []
    for name in config.font_files:
        source = config.font_root / name
        if not source.exists():
            errors.append(f"Vendor font not found: {source}")
            continue
        destination = config.vendor_fonts_dir / name
        shutil.copy2(source, destination)
        _log_debug(f"  Copied {source} -> {destination}")
        copied.append(destination)

    if copied:
        _log_success(f"Copied {len(copied)} vendor font file(s) to {config.vendor_fonts_dir}")
    return CompilationResult(success=not errors, outputs=copied, errors=errors)
