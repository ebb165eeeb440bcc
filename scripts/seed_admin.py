from decimal import Decimal

from backoffice.core.security import create_access_token
from backoffice.database import SessionLocal, init_db
from backoffice.models.branch import Branch
from backoffice.models.employee import Employee
from backoffice.models.user import User, UserRole

def seed():
    init_db()
    db = SessionLocal()
    try:
        # 1. Ensure a branch exists
        branch = db.query(Branch).first()
        if not branch:
            branch = Branch(name="Main Branch")
            db.add(branch)
            db.commit()
            db.refresh(branch)
            print(f"Created branch: {branch.name}")

        # 2. Check if admin exists
        admin_email = "admin@example.com"
        admin = db.query(User).filter(User.email == admin_email).first()
        if not admin:
            admin = User(
                email=admin_email,
                role=UserRole.ADMIN,
                full_name="Admin User",
                is_active=True
            )
            db.add(admin)
            db.commit()
            print(f"Admin user {admin_email} created")

        # 3. A demo employee to run payroll against
        if not db.query(Employee).filter(Employee.branch_id == branch.id).first():
            db.add(Employee(
                name="Demo Employee",
                branch_id=branch.id,
                base_salary=Decimal("500.00"),
                allowance=Decimal("50.00"),
            ))
            db.commit()
            print("Demo employee created")

        token = create_access_token(data={"sub": str(admin.id), "role": admin.role.value})
        print(f"Bearer token for {admin_email}:\n{token}")
    finally:
        db.close()

if __name__ == "__main__":
    seed()
