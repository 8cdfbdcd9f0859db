#!/usr/bin/env python3
"""
Database initialization script for TutorBridge
Run this script to set up the database with the default admin account
"""

import argparse

from app import create_app
from database import init_db, reset_database


def main(argv=None):
    """Main function to initialize database"""
    parser = argparse.ArgumentParser(description='Create or reset the TutorBridge database')
    parser.add_argument('--reset', action='store_true', help='drop all tables and recreate them')
    parser.add_argument('--yes', action='store_true', help='skip the reset confirmation prompt')
    args = parser.parse_args(argv)

    app = create_app()

    if args.reset:
        print("WARNING: This will delete all existing data!")
        confirm = 'yes' if args.yes else input("Are you sure you want to reset the database? (yes/no): ")
        if confirm.lower() == 'yes':
            reset_database(app)
            print("Database reset completed.")
        else:
            print("Database reset cancelled.")
    else:
        # create_app already created missing tables; this reports it explicitly
        init_db(app)
        print(f"Database ready at {app.config['SQLALCHEMY_DATABASE_URI']}")


if __name__ == '__main__':
    main()
