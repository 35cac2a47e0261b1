from evo_fleet.viewer import run_live

if __name__ == "__main__":
    # SPACE pulls, S stops, C continues from the recorded parents.
    run_live(fps=30)
