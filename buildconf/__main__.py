from buildconf.cli.app import main

main()
