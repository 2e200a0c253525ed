"""FastAPI adapter – export page / download router and the static asset mount."""

from typing import Any, Callable, Sequence

from grid_export.application.menu import STATIC_DIR, ExportMenu, render_page
from grid_export.application.menu.widget import BOOTSTRAP_CSS, BOOTSTRAP_JS, FONT_AWESOME_CSS
from grid_export.observability.logging import get_logger

logger = get_logger(__name__)

MenuFactory = Callable[[], ExportMenu]


def _require_fastapi() -> None:
    try:
        import fastapi  # noqa: F401
    except ImportError as exc:
        raise ImportError(
            "Install 'grid-export[fastapi]' to use the FastAPI adapter"
        ) from exc


def create_export_router(
    menu_factory: MenuFactory,
    path: str = "/export",
    *,
    title: str = "Grid export",
    stylesheets: Sequence[str] = (BOOTSTRAP_CSS, FONT_AWESOME_CSS),
    scripts: Sequence[str] = (BOOTSTRAP_JS,),
    tags: list[str] | None = None,
) -> Any:
    """Return a router serving the export page and the export download.

    Parameters
    ----------
    menu_factory:
        Builds a fresh :class:`ExportMenu` per request.
    path:
        ``GET {path}`` renders a page holding the menu; ``POST {path}``
        receives the export form and answers with the file (stream mode) or
        a page linking to the saved file.  Assets are expected under
        ``{path}/assets`` (see :func:`mount_export_assets`).
    """
    _require_fastapi()
    from fastapi import APIRouter, Depends, Request  # type: ignore[import-untyped]
    from fastapi.responses import HTMLResponse, Response  # type: ignore[import-untyped]

    router = APIRouter(tags=tags or ["export"])
    assets_url = f"{path.rstrip('/')}/assets"

    async def form_data(request: Request) -> dict[str, Any]:
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}

    @router.get(path, response_class=HTMLResponse)
    def export_page() -> HTMLResponse:
        """Page with the export menu and its client assets."""
        output = menu_factory().run()
        return HTMLResponse(
            render_page(
                output.html,
                output.view,
                title=title,
                assets_url=assets_url,
                stylesheets=stylesheets,
                scripts=scripts,
            )
        )

    @router.post(path)
    def export_download(form: dict[str, Any] = Depends(form_data)) -> Response:
        """Run the export posted by the menu form."""
        menu = menu_factory()
        output = menu.run(form)
        result = output.result
        if result is None:
            # no trigger flag: behave like the page itself
            return HTMLResponse(
                render_page(output.html, output.view, title=title, assets_url=assets_url,
                            stylesheets=stylesheets, scripts=scripts)
            )
        if result.aborted:
            return Response(status_code=204)
        if result.streamed:
            return Response(
                content=result.data,
                media_type=result.content_type,
                headers={"Content-Disposition": result.content_disposition},
            )
        return HTMLResponse(
            render_page(output.html, None, title=title, assets_url=assets_url,
                        stylesheets=stylesheets, scripts=scripts)
        )

    return router


def mount_export_assets(app: Any, path: str = "/export", *, name: str = "grid-export-assets") -> None:
    """Serve the menu's js / css under ``{path}/assets`` on *app*."""
    _require_fastapi()
    from fastapi.staticfiles import StaticFiles  # type: ignore[import-untyped]

    app.mount(f"{path.rstrip('/')}/assets", StaticFiles(directory=str(STATIC_DIR)), name=name)


def install_export(app: Any, menu_factory: MenuFactory, path: str = "/export", **router_options: Any) -> None:
    """Wire the export router, its assets and the error mapper into *app*."""
    from grid_export.adapters.fastapi.exception_mapper import FastAPIExceptionMapper

    app.include_router(create_export_router(menu_factory, path, **router_options))
    mount_export_assets(app, path)
    FastAPIExceptionMapper().register(app)
    logger.info("export_routes_installed", path=path)


__all__ = ["MenuFactory", "create_export_router", "install_export", "mount_export_assets"]
