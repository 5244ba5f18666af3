from grid_band_backtester.cli import run

run()
