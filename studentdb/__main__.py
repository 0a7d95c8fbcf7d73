from studentdb.demo import main

main()
