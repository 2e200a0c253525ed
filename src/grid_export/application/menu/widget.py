"""Application menu – ExportMenu: the export dropdown for a grid and its request handling.

Usage::

    menu = ExportMenu(columns, ArrayDataProvider(rows), id="orders")
    output = menu.run(form)            # form: the POST body, or {} for a GET
    if output.triggered:
        ...                            # output.result: ExportResult to stream / link
    else:
        ...                            # output.html + output.view assets go in the page
"""
from __future__ import annotations

import copy
import json
import re
import zlib
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import jinja2
from markupsafe import Markup

from grid_export.application.export import (
    ExportConfigResolver,
    ExportFormat,
    ExportHooks,
    ExportParamNames,
    ExportRequestParams,
    ExportResult,
    ExportService,
    ResolvedExport,
    TabularExportRenderer,
)
from grid_export.application.export.resolver import coerce_column_key
from grid_export.application.grid import Column, DataProvider, Formatter, column_label
from grid_export.application.menu.assets import (
    EXPORT_COLUMN_ASSET,
    EXPORT_MENU_ASSET,
    POS_HEAD,
    POS_READY,
    View,
)
from grid_export.application.menu.html import add_css_class, render_attributes, tag
from grid_export.config.settings.export import BS_VERSIONS, TARGET_SELF, TARGETS
from grid_export.config.validation import ExportConfigError
from grid_export.observability.logging import bind_export_context, clear_export_context, get_logger

if TYPE_CHECKING:
    from grid_export.config.settings import ExportSettings

__all__ = [
    "BOOTSTRAP_CSS",
    "BOOTSTRAP_JS",
    "DEFAULT_MESSAGES",
    "ExportMenu",
    "FONT_AWESOME_CSS",
    "MenuOutput",
    "TEMPLATES_DIR",
    "render_page",
]

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

DEFAULT_MESSAGES: dict[str, str] = {
    "allowPopups": "Disable any popup blockers in your browser to ensure proper download.",
    "confirmDownload": "Ok to proceed?",
    "downloadProgress": "Generating the export file. Please wait...",
    "downloadComplete": "Request submitted! You may safely close this dialog after saving your downloaded file.",
}

_env = jinja2.Environment(loader=jinja2.FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)
_env.filters["attrs"] = render_attributes

_PLACEHOLDER = re.compile(r"\{(menu|columns)\}")


@dataclass
class MenuOutput:
    """What one :meth:`ExportMenu.run` call produced.

    ``result`` is set when the request triggered a download; otherwise
    ``html`` holds the menu markup and ``view`` the assets it registered.
    """

    html: Markup
    view: View | None = None
    result: ExportResult | None = None
    resolved: ResolvedExport | None = None

    @property
    def triggered(self) -> bool:
        return self.result is not None


class ExportMenu:
    """Export dropdown for a grid (columns + data provider).

    Menu options:
        id: HTML id prefix; links are ``{id}-{format}``, the selector ``{id}-cols``.
        export_config: Per-format overrides; ``False`` / ``None`` disables a format.
        export_type: Format exported when the request names none.
        as_dropdown: Render a dropdown button; ``False`` renders bare items.
        show_column_selector: Render the column checkboxes (dropdown mode only).
        column_selector: ``key → label`` overrides for the selector entries.
        selected_columns / disabled_columns / hidden_columns / no_export_columns:
            Column key lists controlling the selector and the export.
        dropdown_options: Button attributes plus ``icon``, ``label``,
            ``menu_options``, ``items_before`` and ``items_after``.
        target: ``_self``, ``_blank``, ``_popup`` or ``_iframe`` (forced to
            ``_self`` when not streaming).
        bs_version / font_awesome: Bootstrap flavour of the markup and icons.

    Output options (``filename``, ``folder``, ``link_path``, ``stream``,
    ``delete_after_save``, ...) configure the :class:`ExportService`; the
    remaining keyword arguments go to :class:`TabularExportRenderer`.
    """

    def __init__(
        self,
        columns: Sequence[Column],
        provider: DataProvider,
        *,
        id: str = "w0",  # noqa: A002
        formatter: Formatter | None = None,
        export_config: Mapping[str, Any] | None = None,
        export_type: str = ExportFormat.EXCEL_X.value,
        as_dropdown: bool = True,
        show_column_selector: bool = True,
        column_selector: Mapping[int, str] | None = None,
        column_selector_options: Mapping[str, Any] | None = None,
        column_selector_menu_options: Mapping[str, Any] | None = None,
        column_batch_toggle_settings: Mapping[str, Any] | None = None,
        selected_columns: Iterable[Any] | None = None,
        disabled_columns: Iterable[int] = (),
        hidden_columns: Iterable[int] = (),
        no_export_columns: Iterable[int] = (),
        dropdown_options: Mapping[str, Any] | None = None,
        export_container: Mapping[str, Any] | None = None,
        container: Mapping[str, Any] | None = None,
        template: str = "{columns}\n{menu}",
        export_request_param: str | None = None,
        export_type_param: str = "export_type",
        export_cols_param: str = "export_columns",
        col_sel_flag_param: str = "column_selector_enabled",
        export_form_options: Mapping[str, Any] | None = None,
        export_form_hidden_inputs: Mapping[str, Any] | None = None,
        target: str = TARGET_SELF,
        show_confirm_alert: bool = True,
        messages: Mapping[str, str] | None = None,
        dialog_lib: str = "krajeeDialog",
        pjax_container_id: str | None = None,
        bs_version: int = 5,
        font_awesome: bool = False,
        filename: str = "grid-export",
        folder: str | Path = "runtime/export",
        link_path: str = "/runtime/export",
        link_file_name: str | None = None,
        stream: bool = True,
        delete_after_save: bool = False,
        after_save_view: str | Path | bool = "after_save.html.j2",
        encoding: str = "utf-8",
        batch_size: int = 0,
        strip_html: bool = True,
        auto_width: bool = True,
        sheet_name: str = "Worksheet",
        hooks: ExportHooks | Mapping[str, Any] | None = None,
        **renderer_options: Any,
    ) -> None:
        if bs_version not in BS_VERSIONS:
            raise ExportConfigError(f"Unsupported bootstrap version {bs_version!r}", detail={"bs_version": bs_version})
        if target not in TARGETS:
            raise ExportConfigError(f"Unknown export target {target!r}", detail={"target": target})

        self.id = id
        self.columns = list(columns)
        self.provider = provider
        self.formatter = formatter or Formatter()
        self.export_type = str(export_type)
        self.as_dropdown = as_dropdown
        self.show_column_selector = show_column_selector
        self.disabled_columns = frozenset(disabled_columns)
        self.hidden_columns = frozenset(hidden_columns)
        self.no_export_columns = frozenset(no_export_columns) | {
            key for key, column in enumerate(self.columns) if not column.exportable
        }
        self.selected_columns = list(selected_columns) if selected_columns is not None else None
        self.dropdown_options = dict(dropdown_options or {})
        self.export_container = dict(export_container or {})
        self.container = dict(container or {"class": "btn-group", "role": "group"})
        self.template = template
        self.column_selector_options = dict(column_selector_options or {})
        self.column_selector_menu_options = dict(column_selector_menu_options or {})
        self.column_batch_toggle_settings = dict(column_batch_toggle_settings or {})
        self.param_names = ExportParamNames(
            request=export_request_param or f"exportFull_{id}",
            export_type=export_type_param,
            export_columns=export_cols_param,
            column_selector_flag=col_sel_flag_param,
        )
        self.export_form_options = add_css_class(
            {"id": f"{id}-export-form", **(export_form_options or {})}, "kv-export-full-form"
        )
        self.export_form_hidden_inputs = dict(export_form_hidden_inputs or {})
        self.stream = stream
        self.target = target if stream else TARGET_SELF
        self.show_confirm_alert = show_confirm_alert
        self.messages = {**DEFAULT_MESSAGES, **(messages or {})}
        self.dialog_lib = dialog_lib
        self.pjax_container_id = pjax_container_id
        self.bs_version = bs_version
        self.font_awesome = font_awesome
        self.after_save_view = after_save_view
        self.hooks = ExportHooks.from_mapping(hooks)

        self.resolver = ExportConfigResolver(
            self.columns,
            export_config=export_config,
            export_type=self.export_type,
            show_column_selector=show_column_selector,
            as_dropdown=as_dropdown,
            selected_columns=self.selected_columns,
            no_export_columns=self.no_export_columns,
            bs_version=bs_version,
            font_awesome=font_awesome,
        )
        self.renderer = TabularExportRenderer(
            provider,
            formatter=self.formatter,
            batch_size=batch_size,
            strip_html=strip_html,
            auto_width=auto_width,
            sheet_name=sheet_name,
            hooks=self.hooks,
            widget=self,
            **renderer_options,
        )
        self.service = ExportService(
            filename=filename,
            folder=folder,
            link_path=link_path,
            link_file_name=link_file_name,
            stream=stream,
            delete_after_save=delete_after_save,
            encoding=encoding,
            hooks=self.hooks,
            widget=self,
        )
        self.column_selector = {
            key: column_label(key, column, provider) for key, column in enumerate(self.columns)
        }
        self.column_selector.update(column_selector or {})
        self.active_export_type = self.export_type
        self.column_selector_enabled = show_column_selector and as_dropdown

    @classmethod
    def from_settings(
        cls,
        settings: "ExportSettings",
        columns: Sequence[Column],
        provider: DataProvider,
        **options: Any,
    ) -> "ExportMenu":
        """Build a menu whose output defaults come from *settings*; *options* win."""
        values: dict[str, Any] = {
            "filename": settings.filename,
            "folder": settings.folder,
            "link_path": settings.link_path,
            "stream": settings.stream,
            "delete_after_save": settings.delete_after_save,
            "batch_size": settings.batch_size,
            "encoding": settings.encoding,
            "bs_version": settings.bs_version,
            "font_awesome": settings.font_awesome,
            "strip_html": settings.strip_html,
            "auto_width": settings.auto_width,
            "sheet_name": settings.sheet_name,
            "target": settings.target,
            "show_confirm_alert": settings.show_confirm_alert,
        }
        values.update(options)
        return cls(columns, provider, **values)

    # ------------------------------------------------------------------
    # request handling
    # ------------------------------------------------------------------

    def request_params(self, params: ExportRequestParams | Mapping[str, Any] | None) -> ExportRequestParams:
        if params is None:
            return ExportRequestParams()
        if isinstance(params, ExportRequestParams):
            return params
        return ExportRequestParams.from_form(params, self.param_names)

    def run(self, params: ExportRequestParams | Mapping[str, Any] | None = None) -> MenuOutput:
        """Export when *params* trigger a download, else render the menu."""
        params = self.request_params(params)
        self.active_export_type = str(params.export_type or self.export_type)
        self.column_selector_enabled = self.resolver.column_selector_active(params)
        bind_export_context(menu_id=self.id, export_type=self.active_export_type)
        try:
            if params.trigger_download:
                return self._export(params)
            view = View()
            self.register_assets(view)
            return MenuOutput(html=self.render_export_menu(), view=view)
        finally:
            clear_export_context()

    def _export(self, params: ExportRequestParams) -> MenuOutput:
        resolved = self.resolver.resolve(params)
        rendered = self.renderer.render(resolved)
        result = self.service.export(resolved, rendered)
        html = Markup("")
        if not result.streamed and not result.aborted:
            html = self.render_after_save(result)
        return MenuOutput(html=html, result=result, resolved=resolved)

    # ------------------------------------------------------------------
    # markup
    # ------------------------------------------------------------------

    @property
    def default_button_css(self) -> str:
        return "btn-default" if self.bs_version == 3 else "btn-outline-secondary"

    @property
    def toggle_attribute(self) -> str:
        return "data-bs-toggle" if self.bs_version == 5 else "data-toggle"

    @staticmethod
    def _menu_item(item: Any) -> dict[str, Any]:
        if not isinstance(item, Mapping):
            return {"raw": Markup(item)}
        return {
            "label": Markup(item.get("label", "")),
            "link": {"href": item.get("url", "#"), **dict(item.get("link_options") or {})},
            "options": dict(item.get("options") or {}),
        }

    def render_export_menu(self) -> Markup:
        """The format links: a dropdown button group, or bare items when not a dropdown."""
        items: list[dict[str, Any]] = []
        flat: list[Markup] = []
        for fmt, profile in self.resolver.profiles().items():
            label = Markup("")
            if profile.icon:
                icon_options = add_css_class(dict(profile.icon_options), profile.icon)
                label = tag("i", "", icon_options) + Markup(" ")
            label += Markup(profile.label)
            low = fmt.lower()
            link = {"href": "#", **dict(profile.link_options), "id": f"{self.id}-{low}", "data-format": fmt}
            add_css_class(link, f"export-full-{low}")
            options = dict(profile.options)
            if self.as_dropdown:
                if self.bs_version != 3:
                    add_css_class(link, "dropdown-item")
                items.append({"label": label, "link": link, "options": options})
            else:
                tag_name = options.pop("tag", "li")
                anchor = tag("a", label, link)
                flat.append(tag(tag_name, anchor, options) if tag_name is not False else anchor)

        if not self.as_dropdown:
            return Markup("").join(flat)

        options = copy.deepcopy(self.dropdown_options)
        icon_css = "glyphicon glyphicon-export" if self.bs_version == 3 else "fas fa-external-link-alt"
        icon = Markup(options.pop("icon", f'<i class="{icon_css}"></i>'))
        label = options.pop("label", None)
        button_label = icon if label is None else icon + Markup(" ") + Markup(label)
        options.setdefault("title", "Export data in selected format")
        menu_options = add_css_class(dict(options.pop("menu_options", {})), "dropdown-menu")
        before = [self._menu_item(i) for i in options.pop("items_before", [])]
        after = [self._menu_item(i) for i in options.pop("items_after", [])]
        button = add_css_class({"type": "button", **options}, "btn", self.default_button_css, "dropdown-toggle")
        button.setdefault(self.toggle_attribute, "dropdown")
        button.setdefault("aria-expanded", "false")
        export_container = {"class": "btn-group", "role": "group", **self.export_container}

        menu = Markup(
            _env.get_template("menu.html.j2").render(
                export_container=export_container,
                button=button,
                button_label=button_label,
                menu=menu_options,
                items=before + items + after,
                bs_version=self.bs_version,
            )
        )
        parts = {"menu": menu, "columns": self.render_column_selector()}
        content = _PLACEHOLDER.sub(lambda m: str(parts[m.group(1)]), self.template)
        return tag("div", Markup(content), self.container)

    @property
    def column_selector_id(self) -> str:
        return str(self.column_selector_options.get("id", f"{self.id}-cols"))

    @property
    def column_selector_menu_id(self) -> str:
        return str(self.column_selector_menu_options.get("id", f"{self.column_selector_id}-list"))

    def render_column_selector(self) -> Markup:
        """Checkbox dropdown of exportable columns; empty when the selector is off."""
        if not self.column_selector_enabled:
            return Markup("")
        options = copy.deepcopy(self.column_selector_options)
        header = options.pop("header", "Select Columns")
        icon_css = "glyphicon glyphicon-list" if self.bs_version == 3 else "fas fa-list"
        icon = Markup(options.pop("icon", f'<i class="{icon_css}"></i>'))
        button = {
            "id": self.column_selector_id,
            "title": "Select columns to export",
            "type": "button",
            self.toggle_attribute: "dropdown",
            "aria-haspopup": "true",
            "aria-expanded": "false",
            **options,
        }
        add_css_class(button, "btn", self.default_button_css, "dropdown-toggle")
        menu = {
            "id": self.column_selector_menu_id,
            "role": "menu",
            "aria-labelledby": self.column_selector_id,
            **self.column_selector_menu_options,
        }
        add_css_class(menu, "dropdown-menu", "kv-checkbox-list")
        toggle = {"show": True, "label": "Toggle All", "options": {}, "label_options": {}}
        toggle.update(self.column_batch_toggle_settings)
        toggle["options"] = add_css_class(dict(toggle["options"]), "kv-toggle-all")

        if self.selected_columns is None:
            selected = set(self.column_selector)
        else:
            selected = {coerce_column_key(k) for k in self.selected_columns}
        columns = [
            {
                "key": key,
                "label": label,
                "checked": key in selected,
                "disabled": key in self.disabled_columns,
                "hidden": key in self.hidden_columns,
            }
            for key, label in self.column_selector.items()
            if key not in self.no_export_columns
        ]
        return Markup(
            _env.get_template("columns.html.j2").render(
                button=button,
                icon=icon,
                menu=menu,
                header=header if header else None,
                batch_toggle=toggle,
                all_selected=all(c["checked"] for c in columns if not c["disabled"]),
                columns=columns,
                checkbox_css="checkbox" if self.bs_version == 3 else "form-check",
                bs_version=self.bs_version,
            )
        )

    def render_after_save(self, result: ExportResult) -> Markup:
        """Notice with the saved file's link; empty when ``after_save_view`` is ``False``."""
        if self.after_save_view is False or self.after_save_view is None:
            return Markup("")
        view = self.after_save_view
        if view is True:
            view = "after_save.html.j2"
        path = Path(str(view))
        if path.is_absolute():
            template = _env.from_string(path.read_text(encoding="utf-8"))
        else:
            template = _env.get_template(str(view))
        return Markup(
            template.render(
                result=result,
                title="Export generated",
                message="Download the exported file:",
                deleted_message="The exported file was generated and removed from the server.",
                icon="fas fa-download" if self.bs_version != 3 else "glyphicon glyphicon-download-alt",
            )
        )

    # ------------------------------------------------------------------
    # assets
    # ------------------------------------------------------------------

    def client_settings(self) -> dict[str, Any]:
        """The settings object the client script reads (``kvexpmenu_*``)."""
        settings: dict[str, Any] = {
            "target": self.target,
            "formOptions": self.export_form_options,
            "messages": self.messages,
            "exportType": self.active_export_type,
            "colSelFlagParam": self.param_names.column_selector_flag,
            "colSelEnabled": 1 if self.column_selector_enabled else 0,
            "exportRequestParam": self.param_names.request,
            "exportTypeParam": self.param_names.export_type,
            "exportColsParam": self.param_names.export_columns,
            "exportFormHiddenInputs": self.export_form_hidden_inputs,
            "showConfirmAlert": self.show_confirm_alert,
            "dialogLib": self.dialog_lib,
        }
        if self.column_selector_enabled:
            settings["colSelId"] = self.column_selector_id
        return settings

    def register_assets(self, view: View) -> str:
        """Register bundles and scripts on *view*; returns the settings variable name."""
        view.register_bundle(EXPORT_MENU_ASSET)
        encoded = json.dumps(self.client_settings(), separators=(",", ":"))
        variable = f"kvexpmenu_{zlib.crc32(encoded.encode('utf-8')):08x}"
        view.register_js(f"var {variable} = {encoded};\n", POS_HEAD)

        script = ""
        for fmt, profile in self.resolver.profiles().items():
            alert = json.dumps(profile.alert_msg)
            script += f"jQuery('#{self.id}-{fmt.lower()}').exportdata({{\"settings\":{variable},\"alertMsg\":{alert}}});\n"
        if self.column_selector_enabled:
            view.register_bundle(EXPORT_COLUMN_ASSET)
            script += f"jQuery('#{self.column_selector_menu_id}').exportcolumns({{}});\n"
        if script and self.pjax_container_id:
            script += f"jQuery('#{self.pjax_container_id}').on('pjax:complete', function() {{\n{script}}});\n"
        view.register_js(script, POS_READY)
        logger.debug("export_menu_assets_registered", variable=variable, bundles=list(view.bundles))
        return variable


BOOTSTRAP_CSS = "https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css"
BOOTSTRAP_JS = "https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/js/bootstrap.bundle.min.js"
FONT_AWESOME_CSS = "https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.5.2/css/all.min.css"


def render_page(
    content: Markup | str,
    view: View | None = None,
    *,
    title: str = "Grid export",
    assets_url: str = "/assets",
    stylesheets: Sequence[str] = (BOOTSTRAP_CSS, FONT_AWESOME_CSS),
    scripts: Sequence[str] = (BOOTSTRAP_JS,),
) -> str:
    """A complete HTML page around *content* with the assets of *view*."""
    return _env.get_template("page.html.j2").render(
        title=title,
        content=Markup(content),
        view=view or View(),
        assets_url=assets_url,
        stylesheets=stylesheets,
        scripts=scripts,
    )
