from middlengine.cli import main

main()
