"""Vector layers API: list, import, export, draw/edit sessions."""

from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, Request, Response, UploadFile

from vectors.errors import (
    EmptyLayerError,
    FileTooLargeError,
    InvalidTransitionError,
    UnsupportedFormatError,
)

router = APIRouter(prefix="/api/vectors", tags=["vectors"])


def _get_control(request: Request):
    """Retrieve the VectorsControl from app state."""
    control = getattr(request.app.state, "vectors", None)
    if control is None:
        raise HTTPException(503, "Vector layers not available")
    return control


def _layer_summary(layer) -> dict:
    return {
        "name": layer.name,
        "legend": layer.legend,
        "geometry": layer.geometry_class(),
        "features": len(layer.features),
        "visible": layer.visible,
        "z_index": layer.z_index,
        "source_format": layer.source_format,
    }


@router.get("/layers")
async def list_layers(request: Request):
    """Editable layers, topmost first."""
    control = _get_control(request)
    return {"layers": [_layer_summary(l) for l in control.layers.editable_layers()]}


@router.post("/import")
async def import_file(request: Request, file: UploadFile = File(...)):
    """Import an uploaded .geojson, .kml, .gpx or zipped shapefile."""
    control = _get_control(request)
    content = await file.read()
    try:
        layer = control.import_upload(content, file.filename or "")
    except FileTooLargeError as e:
        raise HTTPException(413, str(e))
    except UnsupportedFormatError as e:
        raise HTTPException(415, str(e))

    if layer is None:
        return {"layer": None, "features": 0, "message": "no geometries found"}
    return {"layer": layer.name, "features": len(layer.features)}


@router.get("/layers/{name}/export")
async def export_layer(name: str, request: Request, format: str = "geojson"):
    """Download a layer as geojson, kml, gpx or shp (zip)."""
    control = _get_control(request)
    try:
        exported = control.download(name, format)
    except KeyError:
        raise HTTPException(404, f"Layer not found: {name}")
    except UnsupportedFormatError as e:
        raise HTTPException(415, str(e))

    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@router.post("/layers/{name}/draw")
async def start_draw(name: str, request: Request):
    """Start drawing on a layer; posting again for the same layer cancels."""
    control = _get_control(request)
    try:
        mode = control.start_draw(name)
    except KeyError:
        raise HTTPException(404, f"Layer not found: {name}")
    return {"mode": mode.value}


@router.post("/layers/{name}/edit")
async def start_edit(name: str, request: Request):
    """Start editing a layer; posting again for the same layer finishes."""
    control = _get_control(request)
    try:
        mode = control.start_edit(name)
    except KeyError:
        raise HTTPException(404, f"Layer not found: {name}")
    except EmptyLayerError as e:
        raise HTTPException(409, str(e))
    return {"mode": mode.value}


@router.post("/reset")
async def reset(request: Request):
    control = _get_control(request)
    control.reset()
    return {"mode": control.mode.value}


@router.delete("/feature")
async def delete_feature(request: Request):
    """Delete the feature currently selected for editing."""
    control = _get_control(request)
    try:
        control.delete_active_feature()
    except InvalidTransitionError as e:
        raise HTTPException(409, str(e))
    return {"mode": control.mode.value}


@router.get("/session")
async def get_session(request: Request):
    """Current interaction mode, layer and feature."""
    control = _get_control(request)
    return control.interactions.session.snapshot()
