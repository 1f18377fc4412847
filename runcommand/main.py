#!/usr/bin/env python3
"""
Run Command Service - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Either runs the command once or serves the HTTP API

All execution logic is in the modules, following black box principles.
"""

import argparse
import asyncio
import logging
import logging.config as log_config
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from runcommand.logging_config import get_logging_config
from runcommand.modules.api import (
    CONFLICT_STATUS,
    SPAWNED_STATUS,
    ExitCodeResponse,
    ReadyResponse,
    StatusResponse,
)
from runcommand.modules.auth import SecretAuthModule
from runcommand.modules.config import ConfigurationError, ServiceConfig, get_config, load_service_config
from runcommand.modules.executor import (
    ExecutionController,
    ShellRunner,
    SpawnError,
    TriggerOutcome,
    expand_command,
)

logger = logging.getLogger(__name__)

HELP_TEXT = """
Run Command Service

This service provides an HTTP API to execute a predefined shell command.

Environment Variables:
  CONFIG_FILE_PATH  : Path to the YAML configuration file (default: ./config.yaml)
  EXECUTE_SECRET    : Secret key for authentication (required)
  SHELL_PATH        : Path to the shell used for executing commands (default: /bin/sh)
  LISTEN_PORT       : Port on which the service listens (default: 8080)
  LISTEN_HOST       : Address on which the service listens (default: 0.0.0.0)
  LOG_LEVEL         : Logging level, CRITICAL|ERROR|WARNING|INFO|DEBUG (default: INFO)

Configuration File (YAML):
  command          : Shell command to execute ($VAR references are expanded
                     from the environment on every execution)
  runInBackground  : Return immediately and run the command in the background;
                     triggers are rejected with 409 while a job is running
  runOnce          : Execute the command once at startup and exit with its
                     exit code instead of serving HTTP
  runInBackground and runOnce cannot both be true.

Example config.yaml:
  command: |
    echo "Hello from Run Command Service!"
    echo "Current date: $(date)"

Endpoints:
  GET  /ready   : Returns 200 OK if the service is running
  POST /execute : Executes the configured command and returns its exit code
                  (requires 'x-secret' header for authentication)
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.
    """
    service_config: ServiceConfig = app.state.service_config
    mode = "background" if service_config.command.run_in_background else "foreground"
    logger.info(f"Run Command Service starting on {service_config.host}:{service_config.port} ({mode} mode)")

    yield

    controller: ExecutionController = app.state.controller
    await controller.shutdown()
    logger.info("Run Command Service shutdown complete")


def create_app(service_config: ServiceConfig, runner: Optional[ShellRunner] = None) -> FastAPI:
    """
    Create the FastAPI application for a resolved configuration.

    Args:
        service_config: Validated service configuration
        runner: Shell runner override (defaults to one using the configured shell)

    Returns:
        FastAPI application with controller and auth module on app.state
    """
    app = FastAPI(
        title="Run Command Service",
        description="Remote trigger for a predefined shell command",
        version="1.0.0",
        lifespan=lifespan,
    )

    runner = runner or ShellRunner(service_config.shell_path)
    app.state.service_config = service_config
    app.state.controller = ExecutionController(service_config.command, runner)
    app.state.auth_module = SecretAuthModule(service_config.execute_secret)

    app.add_api_route("/ready", ready, methods=["GET"], response_model=ReadyResponse)
    app.add_api_route(
        "/execute",
        execute,
        methods=["POST"],
        responses={
            200: {"description": "Command succeeded or background job spawned"},
            401: {"description": "Missing or invalid x-secret header"},
            409: {"model": StatusResponse, "description": "Background job still running"},
            500: {"model": ExitCodeResponse, "description": "Command failed"},
        },
    )
    return app


# Dependency injection helpers
async def verify_secret(
    request: Request,
    x_secret: Optional[str] = Header(None, description="Shared execute secret"),
) -> None:
    """Reject the request unless it carries the configured secret."""
    auth_module: SecretAuthModule = request.app.state.auth_module
    if not auth_module.verify_secret(x_secret):
        raise HTTPException(401, "Unauthorized")


async def ready():
    """
    Readiness endpoint for container health checks.

    Returns:
        200: Service is running
    """
    return ReadyResponse(status="ok")


async def execute(request: Request, _: None = Depends(verify_secret)):
    """
    Execute the configured command.

    Returns:
        200: Command exited 0, or background job spawned
        401: Unauthorized
        409: Background job still running
        500: Command exited non-zero, or could not be started
    """
    controller: ExecutionController = request.app.state.controller

    try:
        result = await controller.trigger()
    except SpawnError as e:
        logger.error(f"Failed to start command: {e}")
        raise HTTPException(500, str(e))

    if result.outcome == TriggerOutcome.CONFLICT:
        return JSONResponse(
            status_code=409, content=StatusResponse(status=CONFLICT_STATUS).model_dump()
        )

    if result.outcome == TriggerOutcome.SPAWNED:
        return StatusResponse(status=SPAWNED_STATUS)

    body = ExitCodeResponse(exit_code=result.exit_code).model_dump()
    return JSONResponse(status_code=200 if result.success else 500, content=body)


def log_command(service_config: ServiceConfig) -> None:
    """Log the command as it would be executed right now."""
    logger.info("Command that will be executed:")
    logger.info("----------------------------------------")
    logger.info(expand_command(service_config.command.command))
    logger.info("----------------------------------------")


def run(service_config: ServiceConfig) -> int:
    """
    Run the service for a resolved configuration.

    Returns:
        Process exit code
    """
    log_command(service_config)

    if service_config.command.run_once:
        controller = ExecutionController(
            service_config.command, ShellRunner(service_config.shell_path)
        )
        try:
            return asyncio.run(controller.run_once())
        except SpawnError as e:
            logger.error(str(e))
            return 1

    app = create_app(service_config)
    uvicorn.run(
        app,
        host=service_config.host,
        port=service_config.port,
        log_level=service_config.log_level.lower(),
        log_config=get_logging_config(service_config.log_level),
    )
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="run-command-service",
        description=HELP_TEXT,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point."""
    parse_args(argv)

    try:
        config_module = get_config()
    except ConfigurationError as e:
        log_config.dictConfig(get_logging_config())
        logger.error(str(e))
        return 1

    # Use dict config for logging, not file path
    log_config.dictConfig(get_logging_config(config_module.get("log_level")))

    logger.info("Starting Run Command Service")
    try:
        service_config = load_service_config(config_module)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    return run(service_config)


if __name__ == "__main__":
    raise SystemExit(main())
