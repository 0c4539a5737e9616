import logging

from flask import Flask
from flask_cors import CORS
from config import get_config
from controllers.game_controller import router as game_routes
from database import Base, engine
import models.game  # noqa: F401  registers the games table

config = get_config()

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

Base.metadata.create_all(bind=engine)

app = Flask(__name__)
CORS(app, origins=config.allowed_origins)
app.register_blueprint(game_routes, url_prefix="/api")

if __name__ == "__main__":
    app.run(debug=config.debug)
