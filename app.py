import logging

from flask import Flask

from config import Config
from utils.db import init_db_connection
from utils.errors import register_error_handlers

# Import controllers
from controllers.organisation_controller import organisations_bp


def create_app(config=Config):
    app = Flask(__name__)               # Initialize Flask app
    app.config.from_object(config)      # Load configuration from Config class

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_db_connection(app)             # Initialize MongoDB connection
    register_error_handlers(app)

    # Register Blueprint
    app.register_blueprint(organisations_bp)

    app.logger.info("Organisation service ready")
    return app


# Run the app
if __name__ == "__main__":
    create_app().run(debug=True)
