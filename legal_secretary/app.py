"""
Legal Secretary - template library service.
Drafts legal and administrative documents from a library of templates,
keeping the library in sync between local storage and a remote JSON store.
"""

import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from legal_secretary.config import (
    log_event,
    gemini_model,
    DATA_DIR,
    BUILD_VERSION,
    HOST,
    PORT,
)
from legal_secretary.routes import api
from legal_secretary.services.library import TemplateLibrary
from legal_secretary.services.storage import LocalStorage, TemplateStore


def create_app(library: Optional[TemplateLibrary] = None) -> Flask:
    """Build the Flask app around a template library (a file-backed one by default)."""
    app = Flask(__name__)
    CORS(app)

    if library is None:
        library = TemplateLibrary(TemplateStore(LocalStorage(DATA_DIR)))
        library.start()

    app.extensions["template_library"] = library
    app.register_blueprint(api)
    return app


def main():
    app = create_app()
    library = app.extensions["template_library"]
    log_event(
        logging.INFO,
        "server_startup",
        gemini_ready=bool(gemini_model),
        data_dir=str(DATA_DIR),
        data_version=library.version,
        sync=library.sync_state,
        build=BUILD_VERSION,
        port=PORT,
    )

    print(f"""
    ╔═══════════════════════════════════════════════════╗
    ║      ⚖️  LEGAL SECRETARY - Template Library        ║
    ╠═══════════════════════════════════════════════════╣
    ║   Gemini:          {'✅ Ready' if gemini_model else '❌ No API Key'}                    ║
    ║   Data Revision:   {library.version:<25}      ║
    ║   Cloud Sync:      {library.sync_state:<25}      ║
    ╠═══════════════════════════════════════════════════╣
    ║   Server: http://{HOST}:{PORT}                     ║
    ╚═══════════════════════════════════════════════════╝
    """)
    try:
        app.run(host=HOST, port=PORT, threaded=True)
    finally:
        library.shutdown()


if __name__ == '__main__':
    main()
