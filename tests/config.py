from libb import Setting

Setting.unlock()

sqlite = Setting()
sqlite.drivername='sqlite'
sqlite.database=':memory:'

Setting.lock()
