from clawseo.pipeline import main

main()
