from forkrel.cli.app import main

main()
