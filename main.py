"""
QuizWordz Game Server - Main Entry Point

This is the main entry point for the game server.
It initializes all services and starts the Flask-SocketIO application.
"""

from quizwordz import create_app
from quizwordz.config import Config, validate_word_list_integrity
from quizwordz.services.game_service import initialize_game_service
from quizwordz.services.store import create_store
from quizwordz.utils.game_logger import game_logger


def main():
    """Main function to initialize services and start the server."""
    try:
        print("Initializing services...")

        validate_word_list_integrity(Config.WORD_LENGTH)
        print("✓ Word list validated")

        store = create_store(Config.STORE_BACKEND, Config.MONGO_URI, Config.MONGO_DB)
        print(f"✓ Session store ready ({Config.STORE_BACKEND})")

        initialize_game_service(store, Config.WORD_LENGTH, Config.MAX_ATTEMPTS)
        print("✓ Game service initialized successfully")

        print("Creating Flask application...")
        app, socketio = create_app(Config)
        print("✓ Flask application created successfully")

        game_logger.logger.info("QuizWordz Server Starting")

        print(f"\nStarting QuizWordz Game Server on {Config.HOST}:{Config.PORT}")
        print(f"Debug mode: {Config.DEBUG}")
        print(f"Word length: {Config.WORD_LENGTH}, max attempts: {Config.MAX_ATTEMPTS}")
        print("=" * 50)

        socketio.run(app, host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("QuizWordz Server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
