from gitgraph_layout.cli import main

main()
