import subprocess
import shutil
import os
import sys

def run_unit_tests():
    """Run unit tests in studentdb/tests."""
    print("Running unit tests...")
    result = subprocess.run([sys.executable, "-m", "pytest", "studentdb/tests"], check=False)
    sys.exit(result.returncode)

def run_integration_tests():
    """Run end-to-end tests in tests/."""
    print("Running integration tests...")
    result = subprocess.run([sys.executable, "-m", "pytest", "tests"], check=False)
    sys.exit(result.returncode)

def run_all_tests():
    """Run all tests (unit + integration)."""
    print("Running all tests...")
    result = subprocess.run([sys.executable, "-m", "pytest"], check=False)
    sys.exit(result.returncode)

def clean_project():
    """Remove caches, the test database directory, and stray demo databases."""
    folders_to_remove = [".pytest_cache", os.path.join("static", "test-sqlite")]

    for root, dirs, files in os.walk("."):
        if "__pycache__" in dirs:
            folders_to_remove.append(os.path.join(root, "__pycache__"))

    print("Cleaning up project...")
    for folder in set(folders_to_remove):
        if os.path.exists(folder):
            shutil.rmtree(folder)
            print(f"Removed: {folder}")

    demo_db = "TestStudentDB.sqlite"
    if os.path.exists(demo_db):
        os.remove(demo_db)
        print(f"Removed: {demo_db}")

    print("Cleanup complete.")
