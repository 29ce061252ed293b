from simbridge.cli.main import main

main()
