from photo_frame.app import main

main()
