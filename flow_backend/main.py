"""
Flowtree Backend - FastAPI Application

This is the main entry point for the flow editor backend.
It provides:
- REST API for flow operations (create/edit/move/delete steps, undo/redo)
- Drag start/stop endpoints that keep no-op drags out of history
- Reload of the record list from the configured feed
- CORS configuration for local frontend development
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from flow_core import (
    CreateNodeRequest,
    DragRequest,
    EditNodeRequest,
    MoveNodeRequest,
    NodeType,
    UpdateNodeRequest,
    build_node_updates,
    validate_records,
    validation_summary,
)

from .config import Settings, get_settings
from .context import FlowContext, create_context
from .logging_config import setup_logging


def get_flow(request: Request) -> FlowContext:
    """The app's FlowContext (set up by create_app)."""
    return request.app.state.flow


def _flow_response(flow: FlowContext) -> dict:
    return {"success": True, **flow.manager.get_state()}


def create_app(settings: Optional[Settings] = None, context: Optional[FlowContext] = None) -> FastAPI:
    """
    Build the API around one FlowContext.

    Args:
        settings: Settings (get_settings() if None)
        context: Prebuilt context (created from settings if None)
    """
    settings = settings or get_settings()
    flow = context or create_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initial load on startup."""
        if settings.load_on_startup:
            await flow.load()
        yield

    app = FastAPI(
        title="Flowtree API",
        description="Backend API for the automation flow editor",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.flow = flow

    # CORS for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Health Check ---

    @app.get("/api/health")
    async def health_check(flow: FlowContext = Depends(get_flow)):
        """Health check endpoint."""
        return {"status": "ok", "nodes": len(flow.manager.nodes)}

    # --- Flow State ---

    @app.get("/api/flow")
    async def get_flow_state(flow: FlowContext = Depends(get_flow)):
        """Get the current flow view and history counters."""
        return {**flow.manager.get_state(), "error": flow.last_error}

    @app.post("/api/flow/reload")
    async def reload_flow(flow: FlowContext = Depends(get_flow)):
        """Re-fetch the record list and start over."""
        result = await flow.load()
        if result.is_error:
            return {"success": False, "error": result.error}
        return _flow_response(flow)

    @app.get("/api/flow/validate")
    async def validate_flow(flow: FlowContext = Depends(get_flow)):
        """
        Validate the current records for structural issues.

        Returns a list of issues (errors, warnings, info) and a summary.
        """
        issues = validate_records(flow.manager.raw_records())
        return {
            "success": True,
            "issues": [issue.to_dict() for issue in issues],
            "summary": validation_summary(issues)
        }

    # --- Undo/Redo ---

    @app.post("/api/undo")
    async def undo(flow: FlowContext = Depends(get_flow)):
        """Undo the last action."""
        if flow.manager.undo() is not None:
            return _flow_response(flow)
        return {"success": False, "message": "Nothing to undo"}

    @app.post("/api/redo")
    async def redo(flow: FlowContext = Depends(get_flow)):
        """Redo the last undone action."""
        if flow.manager.redo() is not None:
            return _flow_response(flow)
        return {"success": False, "message": "Nothing to redo"}

    @app.get("/api/history")
    async def history_info(flow: FlowContext = Depends(get_flow)):
        """Undo/redo counters."""
        return flow.manager.history.info().to_dict()

    # --- Node Operations ---

    @app.post("/api/nodes")
    async def create_node(request: CreateNodeRequest, flow: FlowContext = Depends(get_flow)):
        """Create a step (a business-hours step also gets its two branches)."""
        try:
            records = flow.manager.create_node(request)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {
            **_flow_response(flow),
            "created": [record.id for record in records],
        }

    @app.get("/api/nodes/{node_id}")
    async def get_node(node_id: str, flow: FlowContext = Depends(get_flow)):
        """Get a specific node."""
        node = flow.manager.get_node(node_id)
        if node:
            return {"success": True, "node": node.to_json_dict()}
        raise HTTPException(status_code=404, detail="Node not found")

    @app.patch("/api/nodes/{node_id}")
    async def update_node(node_id: str, request: UpdateNodeRequest, flow: FlowContext = Depends(get_flow)):
        """Rename a node and/or merge data keys into it."""
        try:
            node = flow.manager.update_node(node_id, request.model_dump(exclude_none=True))
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=f"Invalid data: {e.error_count()} validation error(s)")
        if node:
            return {"success": True, "node": node.to_json_dict()}
        raise HTTPException(status_code=404, detail="Node not found")

    @app.post("/api/nodes/{node_id}/edit")
    async def edit_node(node_id: str, request: EditNodeRequest, flow: FlowContext = Depends(get_flow)):
        """Save editor form state for a node."""
        node = flow.manager.get_node(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail="Node not found")
        updated = flow.manager.update_node(node_id, build_node_updates(node.payload, request))
        return {"success": True, "node": updated.to_json_dict()}

    @app.patch("/api/nodes/{node_id}/position")
    async def move_node(node_id: str, request: MoveNodeRequest, flow: FlowContext = Depends(get_flow)):
        """Move a node."""
        node = flow.manager.update_node_position(node_id, request.to_position())
        if node:
            return {"success": True, "node": node.to_json_dict()}
        raise HTTPException(status_code=404, detail="Node not found")

    @app.delete("/api/nodes/{node_id}")
    async def delete_node(node_id: str, flow: FlowContext = Depends(get_flow)):
        """Delete a node together with its whole subtree."""
        removed = flow.manager.remove_node(node_id)
        return {**_flow_response(flow), "removed": removed}

    # --- Drag ---

    @app.post("/api/drag/start")
    async def drag_start(request: DragRequest, flow: FlowContext = Depends(get_flow)):
        """A drag gesture began."""
        flow.drag_guard.on_drag_start(request.nodes)
        return {"success": True}

    @app.post("/api/drag/stop")
    async def drag_stop(request: DragRequest, flow: FlowContext = Depends(get_flow)):
        """A drag gesture ended; report whether it produced an undo step."""
        recorded = flow.drag_guard.on_drag_stop(request.nodes)
        return {**_flow_response(flow), "recorded": recorded}

    # --- Enums for Frontend ---

    @app.get("/api/enums/types")
    async def get_types():
        """Get available step types."""
        return {"types": [t.value for t in NodeType]}

    return app


def run():
    """Run the API with uvicorn using the configured host/port."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    uvicorn.run("flow_backend.main:create_app", factory=True, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
