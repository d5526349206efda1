#!/usr/bin/env python3
"""
Management commands for Kaiban.

Usage:
    python manage.py init_db
    python manage.py check_db
    python manage.py reset_db
    python manage.py next_case_number
"""

import sys
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text
from database import engine, init_db, reset_db
from operations.contract import CASE_NUMBER_PREFIX
from operations.sequence import next_case_number
from settings import logger


def check_db():
    """Check database connection and tables."""
    try:
        with Session(engine) as session:
            result = session.exec(text("SELECT name FROM sqlite_master WHERE type='table'"))
            tables = result.fetchall()
            logger.info(f"Database connected. Found {len(tables)} tables: {[t[0] for t in tables]}")
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        sys.exit(1)


def show_next_case_number():
    """Print the case number the next created task would get."""
    with Session(engine) as session:
        print(f"{CASE_NUMBER_PREFIX}{next_case_number(session)}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python manage.py <command>")
        print("Commands:")
        print("  init_db          - Initialize database tables")
        print("  check_db         - Check database connection")
        print("  reset_db         - Drop and recreate all tables")
        print("  next_case_number - Show the next free TASK-<n>")
        sys.exit(1)

    command = sys.argv[1]

    if command == "init_db":
        init_db()
    elif command == "check_db":
        check_db()
    elif command == "reset_db":
        reset_db()
    elif command == "next_case_number":
        show_next_case_number()
    else:
        print(f"Unknown command: {command}")
        print("Run 'python manage.py' to see available commands")
        sys.exit(1)


if __name__ == "__main__":
    main()
