from bb_scrape.main import run

run()
