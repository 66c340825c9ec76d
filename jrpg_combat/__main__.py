from jrpg_combat.main import main

main()
