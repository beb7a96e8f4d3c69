from relaunch.relaunch import run

run()
