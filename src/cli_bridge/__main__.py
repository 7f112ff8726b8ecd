from cli_bridge.main import run

run()
