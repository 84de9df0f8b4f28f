"""
Lancement local: `python -m storefront`.

Variables lues:
- PORT (8080 par défaut), HOST (0.0.0.0)
- UVICORN_RELOAD: "1"/"true"/"yes" pour le rechargement auto en dev
- LOG_LEVEL: niveau uvicorn ("info", "debug", ...)
"""
import os

import uvicorn


def main() -> None:
    reload_enabled = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "storefront.asgi:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8080)),
        reload=reload_enabled,
        log_level=os.environ.get("LOG_LEVEL", "info"),
    )


if __name__ == "__main__":
    main()
