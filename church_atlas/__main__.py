from church_atlas.app import main

main()
