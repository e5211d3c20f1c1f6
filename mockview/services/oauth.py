from authlib.integrations.starlette_client import OAuth
from mockview.config import GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET

oauth = OAuth()

# Google OAuth; the ID token is handed to Supabase to open a session
if GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET:
    oauth.register(
        name="google",
        client_id=GOOGLE_CLIENT_ID,
        client_secret=GOOGLE_CLIENT_SECRET,
        server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
        client_kwargs={"scope": "openid email profile"},
        authorize_params={"access_type": "offline", "prompt": "consent"},
    )


def google_enabled() -> bool:
    return hasattr(oauth, "google")
