"""
FastAPI dependencies shared by the routers.

The TransferEngine is built once in the application lifespan (main.py) and
stored on app.state, so every request in the process shares the same
account locks. Routes receive it through get_transfer_engine, which tests
override to point the engine at an isolated database.
"""

from fastapi import Request

from ledger.services.transfer_engine import TransferEngine


async def get_transfer_engine(request: Request) -> TransferEngine:
    """Return the application's TransferEngine."""
    return request.app.state.transfer_engine
