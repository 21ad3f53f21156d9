from devops_tools.cli.main import main

main()
