from ciudadano_digital.server import main

main()
