"""Application menu – asset bundles and the per-page View that collects them.

A :class:`View` gathers the bundles and inline scripts a page needs; the
page template then emits them with :meth:`View.render_head` and
:meth:`View.render_body_end`.  Bundle files are served from the package's
``static`` directory.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from markupsafe import Markup, escape

__all__ = [
    "AssetBundle",
    "BUNDLES",
    "DIALOG_ASSET",
    "EXPORT_COLUMN_ASSET",
    "EXPORT_MENU_ASSET",
    "JQUERY_ASSET",
    "POS_HEAD",
    "POS_READY",
    "STATIC_DIR",
    "View",
]

STATIC_DIR = Path(__file__).parent / "static"

POS_HEAD = "head"
POS_READY = "ready"


@dataclass(frozen=True)
class AssetBundle:
    """A named group of js / css files and the bundles it depends on.

    Paths that are absolute URLs are emitted as-is; others are resolved
    against the base URL the static files are mounted under.
    """

    name: str
    js: tuple[str, ...] = ()
    css: tuple[str, ...] = ()
    depends: tuple[str, ...] = ()


JQUERY_ASSET = AssetBundle("JqueryAsset", js=("https://code.jquery.com/jquery-3.7.1.min.js",))
DIALOG_ASSET = AssetBundle("DialogAsset", js=("js/kv-dialog.js",), depends=("JqueryAsset",))
EXPORT_MENU_ASSET = AssetBundle("ExportMenuAsset", js=("js/kv-export-data.js",), depends=("DialogAsset",))
EXPORT_COLUMN_ASSET = AssetBundle(
    "ExportColumnAsset",
    js=("js/kv-export-columns.js",),
    css=("css/kv-export-columns.css",),
    depends=("DialogAsset",),
)

BUNDLES: dict[str, AssetBundle] = {
    bundle.name: bundle for bundle in (JQUERY_ASSET, DIALOG_ASSET, EXPORT_MENU_ASSET, EXPORT_COLUMN_ASSET)
}


def _url(base_url: str, path: str) -> str:
    if path.startswith(("http://", "https://", "//", "/")):
        return path
    return f"{base_url.rstrip('/')}/{path}"


@dataclass
class View:
    """Assets and scripts registered while rendering one page."""

    bundles: dict[str, AssetBundle] = field(default_factory=dict)
    scripts: dict[str, list[str]] = field(default_factory=lambda: {POS_HEAD: [], POS_READY: []})

    def register_bundle(self, bundle: AssetBundle | str) -> AssetBundle:
        """Register *bundle* after its dependencies; registering twice is a no-op."""
        if isinstance(bundle, str):
            bundle = BUNDLES[bundle]
        if bundle.name not in self.bundles:
            for dependency in bundle.depends:
                self.register_bundle(dependency)
            self.bundles[bundle.name] = bundle
        return bundle

    def register_js(self, script: str, position: str = POS_READY) -> None:
        if script and script not in self.scripts.setdefault(position, []):
            self.scripts[position].append(script)

    def js_files(self) -> list[str]:
        return [path for bundle in self.bundles.values() for path in bundle.js]

    def css_files(self) -> list[str]:
        return [path for bundle in self.bundles.values() for path in bundle.css]

    def render_head(self, base_url: str = "/assets") -> Markup:
        lines = [f'<link rel="stylesheet" href="{escape(_url(base_url, p))}">' for p in self.css_files()]
        lines += [f'<script src="{escape(_url(base_url, p))}"></script>' for p in self.js_files()]
        if self.scripts.get(POS_HEAD):
            lines.append("<script>\n" + "".join(self.scripts[POS_HEAD]) + "</script>")
        return Markup("\n".join(lines))

    def render_body_end(self) -> Markup:
        ready = self.scripts.get(POS_READY) or []
        if not ready:
            return Markup("")
        return Markup("<script>\njQuery(function ($) {\n" + "".join(ready) + "});\n</script>")

    def has_bundle(self, names: Iterable[str] | str) -> bool:
        wanted = [names] if isinstance(names, str) else list(names)
        return all(name in self.bundles for name in wanted)
