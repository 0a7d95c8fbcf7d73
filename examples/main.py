from studentdb.config import DemoConfig
from studentdb.demo import run_demo

def main():
    """
    Runs the console walk-through without key-press pauses.
    """
    config = DemoConfig(pause=False, seed=3520)
    run_demo(config)

if __name__ == "__main__":
    main()
