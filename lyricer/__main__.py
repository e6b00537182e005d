from lyricer.cli import main

main()
