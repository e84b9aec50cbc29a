"""
Script to create the service database tables for local development.
Run with: python init_db.py
"""
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from moodplaces.db.session import init_db  # noqa: E402


def main():
    """Main function to initialize the database."""
    print("Initializing database...")
    init_db()
    print("Done!")


if __name__ == "__main__":
    main()
