from types import SimpleNamespace

from fastapi import FastAPI

from gello.config import get_settings
from gello.db.session import close_supabase
from gello.db.supabase import SupabaseProvider


class RecordingAuth:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


async def test_shutdown_closes_both_clients():
    client = SimpleNamespace(auth=RecordingAuth())
    admin_client = SimpleNamespace(auth=RecordingAuth())
    app = FastAPI()
    app.state.supabase = SupabaseProvider(get_settings(), client, admin_client)

    await close_supabase(app)

    assert client.auth.closed
    assert admin_client.auth.closed
    assert app.state.supabase is None


async def test_shutdown_without_provider():
    app = FastAPI()

    await close_supabase(app)

    assert app.state.supabase is None
