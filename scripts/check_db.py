from sqlalchemy import inspect

from backoffice.database import engine

def check_db():
    inspector = inspect(engine)
    print("Tables in DB:")
    for table in inspector.get_table_names():
        print(f" - {table}")
        for col in inspector.get_columns(table):
            print(f"   * {col['name']} ({col['type']})")

if __name__ == "__main__":
    check_db()
