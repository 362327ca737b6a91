from autocoder.cli import main

main()
