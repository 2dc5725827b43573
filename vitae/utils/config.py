"""
Build Configuration

Loads config/pipeline.yaml with OmegaConf, merges it over the built-in
defaults, and resolves every path against the project root. The resulting
BuildConfig is passed explicitly to every task.

Examples:
    >>> config = load_build_config()
    >>> config.dist_dir
    PosixPath('/home/me/site/public/dist')

    >>> config = load_build_config(Path("config/ci.yaml"), project_root=Path("/srv/site"))
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
PROJECT_ROOT = Path(os.getenv("PROJECT_ROOT", Path.cwd()))
VITAE_CONFIG = os.getenv("VITAE_CONFIG", "config/pipeline.yaml")
VITAE_NOTIFY = os.getenv("VITAE_NOTIFY", "true").lower() == "true"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "paths": {
        "public_root": "public",
        "front_root": "front",
        "dist_dir": "public/dist",
        "vendor_fonts_dir": "public/fonts",
        "font_root": "node_modules/font-awesome/fonts",
        "optimized_font_file": "fonts/FontAwesome-subset.woff2",
        "output_html": "index.html",
        "service_worker_out": "sw.js",
        "renderer_entry": "public/index.php",
    },
    "sources": {
        "sass": "front/sass/**/*.scss",
        "typescript": "front/ts/*.ts",
        "type_definitions": "node_modules/@types/**/*.d.ts",
        "service_worker": "public/sw.ts",
        "json": "front/json/*.json",
        "php": "src/*/*.php",
        "composer_lock": "composer.lock",
        "composer_json": "composer.json",
    },
    "fonts": [
        "fontawesome-webfont.woff2",
        "fontawesome-webfont.woff",
        "fontawesome-webfont.ttf",
    ],
    "tools": {
        "sass": "sass",
        "tsc": "tsc",
        "terser": "terser",
        "php": "php",
        "composer": "composer",
    },
    "server": {"host": "localhost", "port": 8080},
    "minify": {"drop_console": True, "mangle_toplevel": True},
    "packaging": {
        "style_marker_pattern": "<!--style:(.+?)-->",
        "license_placeholder": "*Please see the attached CSS file*",
        "renderer_flag": "--one-file",
        "max_output_bytes": 500 << 10,
        "embedded_font_name": "fontawesome-webfont.woff2",
    },
    "watch": {"poll_interval": 0.5},
    "notifications": {"enabled": True, "title": "Build", "subtitle": "Failure!"},
}


@dataclass
class BuildConfig:
    """
    Resolved build configuration.

    Paths are absolute. Source patterns stay relative to project_root so they
    can be passed to Path.glob().
    """

    project_root: Path
    public_root: Path
    front_root: Path
    dist_dir: Path
    vendor_fonts_dir: Path
    font_root: Path
    optimized_font_file: Path
    output_html: Path
    service_worker_out: Path
    renderer_entry: Path

    sass_sources: str
    typescript_sources: str
    type_definitions: str
    service_worker_source: str
    json_sources: str
    php_sources: str
    composer_lock: str
    composer_json: str

    font_files: List[str] = field(default_factory=list)

    sass_command: str = "sass"
    tsc_command: str = "tsc"
    terser_command: str = "terser"
    php_command: str = "php"
    composer_command: str = "composer"

    server_host: str = "localhost"
    server_port: int = 8080

    drop_console: bool = True
    mangle_toplevel: bool = True

    style_marker_pattern: str = "<!--style:(.+?)-->"
    license_placeholder: str = "*Please see the attached CSS file*"
    renderer_flag: str = "--one-file"
    max_output_bytes: int = 500 << 10
    embedded_font_name: Optional[str] = "fontawesome-webfont.woff2"

    poll_interval: float = 0.5

    notifications_enabled: bool = True
    notification_title: str = "Build"
    notification_subtitle: str = "Failure!"

    def glob(self, pattern: str) -> List[Path]:
        """Sorted files under project_root matching a source pattern."""
        return sorted(p for p in self.project_root.glob(pattern) if p.is_file())

    def renderer_command(self) -> List[str]:
        """Command line that renders the standalone page to stdout."""
        return [self.php_command, str(self.renderer_entry), self.renderer_flag]


def load_settings(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load pipeline.yaml merged over DEFAULT_SETTINGS.

    A missing config file is not an error: the defaults describe the
    standard project layout.

    Args:
        config_path: Path to the YAML file (default: VITAE_CONFIG env variable)

    Returns:
        Plain nested dict of settings
    """
    base = OmegaConf.create(DEFAULT_SETTINGS)
    if config_path is not None and Path(config_path).exists():
        base = OmegaConf.merge(base, OmegaConf.load(config_path))
    return OmegaConf.to_container(base, resolve=True)


def load_build_config(
    config_path: Optional[Path] = None,
    project_root: Optional[Path] = None,
    notifications: Optional[bool] = None,
) -> BuildConfig:
    """
    Build a BuildConfig for a project.

    Args:
        config_path: YAML config file; relative paths resolve against project_root
        project_root: Project root (default: PROJECT_ROOT env variable or cwd)
        notifications: Force desktop notifications on/off (default: VITAE_NOTIFY and YAML)

    Returns:
        BuildConfig with absolute paths
    """
    root = Path(project_root or PROJECT_ROOT).resolve()
    if config_path is None:
        config_path = Path(VITAE_CONFIG)
    if not Path(config_path).is_absolute():
        config_path = root / config_path

    settings = load_settings(config_path)
    paths = {key: (root / value).resolve() for key, value in settings["paths"].items()}
    sources = settings["sources"]
    tools = settings["tools"]
    packaging = settings["packaging"]
    notify = settings["notifications"]

    if notifications is None:
        notifications = VITAE_NOTIFY and bool(notify["enabled"])

    return BuildConfig(
        project_root=root,
        public_root=paths["public_root"],
        front_root=paths["front_root"],
        dist_dir=paths["dist_dir"],
        vendor_fonts_dir=paths["vendor_fonts_dir"],
        font_root=paths["font_root"],
        optimized_font_file=paths["optimized_font_file"],
        output_html=paths["output_html"],
        service_worker_out=paths["service_worker_out"],
        renderer_entry=paths["renderer_entry"],
        sass_sources=sources["sass"],
        typescript_sources=sources["typescript"],
        type_definitions=sources["type_definitions"],
        service_worker_source=sources["service_worker"],
        json_sources=sources["json"],
        php_sources=sources["php"],
        composer_lock=sources["composer_lock"],
        composer_json=sources["composer_json"],
        font_files=list(settings["fonts"]),
        sass_command=tools["sass"],
        tsc_command=tools["tsc"],
        terser_command=tools["terser"],
        php_command=tools["php"],
        composer_command=tools["composer"],
        server_host=settings["server"]["host"],
        server_port=int(settings["server"]["port"]),
        drop_console=bool(settings["minify"]["drop_console"]),
        mangle_toplevel=bool(settings["minify"]["mangle_toplevel"]),
        style_marker_pattern=packaging["style_marker_pattern"],
        license_placeholder=packaging["license_placeholder"],
        renderer_flag=packaging["renderer_flag"],
        max_output_bytes=int(packaging["max_output_bytes"]),
        embedded_font_name=packaging["embedded_font_name"] or None,
        poll_interval=float(settings["watch"]["poll_interval"]),
        notifications_enabled=notifications,
        notification_title=notify["title"],
        notification_subtitle=notify["subtitle"],
    )
