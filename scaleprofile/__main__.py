from scaleprofile.run import main

main()
